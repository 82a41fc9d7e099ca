# session_api/services/token_cleanup_service.py

from datetime import timedelta

from session_api.services.refresh_token_store import RefreshTokenStore


class TokenCleanupService:
    def __init__(self, store: RefreshTokenStore, *, revoked_retention_days: int = 30) -> None:
        self._store = store
        self._retention = timedelta(days=revoked_retention_days)

    def purge(self) -> int:
        return self._store.purge(revoked_retention=self._retention)
