"""Tests for the background last-active updater."""

import threading

import pytest

from session_api.services.activity_tracker import ActivityTracker


class _BlockingUsers:
    def __init__(self):
        self.release = threading.Event()
        self.touched = []

    def touch_last_active(self, user_id):
        self.release.wait(timeout=5)
        self.touched.append(user_id)
        return True


@pytest.fixture
def users():
    return _BlockingUsers()


@pytest.fixture
def tracker(users):
    tracker = ActivityTracker(users, max_workers=2)
    yield tracker
    users.release.set()
    tracker.shutdown(wait=True)


def test_pending_update_for_same_user_is_not_queued_twice(tracker, users):
    first = tracker.schedule(1)

    assert first is not None
    assert tracker.schedule(1) is None
    assert tracker.schedule(2) is not None

    users.release.set()
    first.result(timeout=5)

    again = tracker.schedule(1)
    assert again is not None
    again.result(timeout=5)
    assert users.touched.count(1) == 2


def test_failed_update_frees_the_slot():
    class _BrokenUsers:
        def touch_last_active(self, user_id):
            raise RuntimeError("db down")

    tracker = ActivityTracker(_BrokenUsers(), max_workers=1)
    try:
        future = tracker.schedule(7)
        with pytest.raises(RuntimeError):
            future.result(timeout=5)

        assert tracker.schedule(7) is not None
    finally:
        tracker.shutdown(wait=True)


def test_schedule_after_shutdown_is_skipped(users):
    tracker = ActivityTracker(users)
    tracker.shutdown(wait=True)

    assert tracker.schedule(1) is None
