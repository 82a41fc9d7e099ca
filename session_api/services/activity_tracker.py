# session_api/services/activity_tracker.py

import threading
from concurrent.futures import Future, ThreadPoolExecutor

from session_api.config.logging_config import get_logger
from session_api.services.user_service import UserService

logger = get_logger(__name__)


class ActivityTracker:
    """Fire-and-forget "last active" bookkeeping.

    Runs after the request's authorization decision; its failures are logged and
    never reach the caller. At most one update per user is queued at a time, so
    the backlog is bounded by the number of distinct active users.
    """

    def __init__(self, user_service: UserService, *, max_workers: int = 2) -> None:
        self._users = user_service
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="activity")
        self._pending: set[int] = set()
        self._lock = threading.Lock()

    def schedule(self, user_id: int) -> Future | None:
        with self._lock:
            if user_id in self._pending:
                return None
            self._pending.add(user_id)

        try:
            future = self._executor.submit(self._touch, user_id)
        except RuntimeError:
            # executor already shut down
            self._release(user_id)
            logger.warning("activity_update_skipped", user_id=user_id)
            return None

        future.add_done_callback(lambda f: self._on_done(f, user_id))
        return future

    def _touch(self, user_id: int) -> bool:
        try:
            return self._users.touch_last_active(user_id)
        finally:
            self._release(user_id)

    def _release(self, user_id: int) -> None:
        with self._lock:
            self._pending.discard(user_id)

    def _on_done(self, future: Future, user_id: int) -> None:
        if future.cancelled():
            self._release(user_id)
            return
        exc = future.exception()
        if exc is not None:
            logger.warning("activity_update_failed", user_id=user_id, error=type(exc).__name__)

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
