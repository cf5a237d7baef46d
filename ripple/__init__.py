"""ripple - impact analysis for hierarchical work artifacts."""

__version__ = "0.3.0"
