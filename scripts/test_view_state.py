from __future__ import annotations

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from h5inspector.errors import SchemaValidationError  # noqa: E402
from h5inspector.session import NoticeQueue, ViewSlot  # noqa: E402


def test_stale_result_after_reset_is_dropped() -> None:
    slot: ViewSlot = ViewSlot()
    token = slot.begin()
    assert slot.busy
    slot.reset()
    assert not slot.resolve(token, "late")
    assert slot.value is None and not slot.busy


def test_newer_request_wins() -> None:
    slot: ViewSlot = ViewSlot()
    first = slot.begin()
    second = slot.begin()
    assert slot.resolve(second, "fresh")
    assert not slot.resolve(first, "stale")
    assert slot.value == "fresh"


def test_failure_keeps_previous_value() -> None:
    slot: ViewSlot = ViewSlot()
    slot.resolve(slot.begin(), "previous prediction")
    token = slot.begin()
    slot.release(token)
    assert slot.value == "previous prediction" and not slot.busy


def test_one_notice_per_failure() -> None:
    q = NoticeQueue()
    q.push_error(SchemaValidationError("bad payload"))
    q.push("Dataset Loaded", "x.txt has been processed.")
    items = q.drain()
    assert [(n.title, n.error) for n in items] == [("Invalid Prediction", True), ("Dataset Loaded", False)]
    assert items[0].body == "bad payload"
    assert q.drain() == []


def main() -> None:
    test_stale_result_after_reset_is_dropped()
    test_newer_request_wins()
    test_failure_keeps_previous_value()
    test_one_notice_per_failure()
    print("View state checks passed.")


if __name__ == "__main__":
    main()
