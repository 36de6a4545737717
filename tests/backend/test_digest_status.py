from __future__ import annotations

from backend.app.status import MAX_RECENT_ERRORS, DigestStatusStore


def test_successful_run() -> None:
    store = DigestStatusStore()
    store.begin(12, used_assistant=True)

    running = store.snapshot()
    assert running["state"] == "running"
    assert running["emails_in_last_run"] == 12
    assert "duration_s" not in running

    store.finish({"totalEmails": 12})
    done = store.snapshot()

    assert done["state"] == "done"
    assert done["runs"] == 1
    assert done["summary"] == {"totalEmails": 12}
    assert done["used_assistant"] is True
    assert done["duration_s"] >= 0


def test_errors_are_kept_most_recent_first() -> None:
    store = DigestStatusStore()
    for i in range(MAX_RECENT_ERRORS + 5):
        store.begin(1, used_assistant=False)
        store.fail(f"error {i}")

    status = store.snapshot()
    assert status["state"] == "error"
    assert status["runs"] == 0
    assert len(status["recent_errors"]) == MAX_RECENT_ERRORS
    assert status["recent_errors"][0] == f"error {MAX_RECENT_ERRORS + 4}"


def test_snapshot_is_a_copy() -> None:
    store = DigestStatusStore()
    store.fail("boom")

    store.snapshot()["recent_errors"].append("tampered")
    assert store.snapshot()["recent_errors"] == ["boom"]
