from ripple.analysis.hierarchy import get_parent_id, id_sort_key, is_direct_child, split_id
from ripple.models import Artifact, LifecycleEvent, is_terminal


def test_parent_of_root_is_none() -> None:
    assert get_parent_id("A") is None


def test_parent_drops_last_segment() -> None:
    assert get_parent_id("A.1") == "A"
    assert get_parent_id("A.1.2") == "A.1"
    assert get_parent_id("C.10.3") == "C.10"


def test_split_id() -> None:
    assert split_id("A.1.2") == ["A", "1", "2"]


def test_direct_child_requires_exactly_one_numeric_segment() -> None:
    assert is_direct_child("A.1", "A")
    assert is_direct_child("A.1.12", "A.1")

    assert not is_direct_child("A.1.2", "A")  # grandchild
    assert not is_direct_child("A", "A")
    assert not is_direct_child("A.1", "A.1")
    assert not is_direct_child("AB.1", "A")  # shares a string prefix only
    assert not is_direct_child("A.1x", "A")
    assert not is_direct_child("A.11", "A.1")


def test_id_sort_key_orders_numeric_segments_numerically() -> None:
    ids = ["A.10", "B", "A.2", "A", "A.2.1", "A.1"]
    assert sorted(ids, key=id_sort_key) == ["A", "A.1", "A.2", "A.2.1", "A.10", "B"]


def _with_events(*names: str) -> Artifact:
    return Artifact(id="A.1.1", events=[LifecycleEvent(event=n) for n in names])


def test_terminal_when_completed_or_cancelled_anywhere_in_history() -> None:
    assert is_terminal(_with_events("draft", "in_progress", "completed"))
    assert is_terminal(_with_events("draft", "cancelled"))
    # A later event does not undo the terminal entry
    assert is_terminal(_with_events("completed", "archived"))


def test_not_terminal_without_terminal_event() -> None:
    assert not is_terminal(_with_events())
    assert not is_terminal(_with_events("draft", "ready", "in_progress", "in_review"))
