# session_api/services/refresh_token_store.py

import hashlib
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from session_api.config.logging_config import get_logger
from session_api.core.exceptions import DuplicateTokenIdError
from session_api.core.time import utcnow
from session_api.entities.refresh_token import DeviceInfo, RefreshTokenRecord
from session_api.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from session_api.infrastructure.database.session import Database
from session_api.repositories.refresh_token_repository import RefreshTokenRepository

logger = get_logger(__name__)


def _sha256(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def _clip(value: str | None, size: int) -> str | None:
    return value[:size] if value else None


class RefreshTokenStore:
    """Durable record of every issued refresh token.

    Each operation runs in its own short transaction, so the database (shared by
    every replica) is the only place that decides whether a session is live.
    """

    def __init__(self, database: Database, *, clock: Callable[[], datetime] = utcnow) -> None:
        self._db = database
        self._clock = clock

    def create(
        self,
        *,
        user_id: int,
        token_id: str,
        expires_at: datetime,
        device_info: DeviceInfo | None = None,
        token: str | None = None,
        last_used_at: datetime | None = None,
    ) -> RefreshTokenRecord:
        with self._db.session("refresh_token.create") as session:
            return self.add_in_session(
                session,
                user_id=user_id,
                token_id=token_id,
                expires_at=expires_at,
                device_info=device_info,
                token=token,
                last_used_at=last_used_at,
            )

    def add_in_session(
        self,
        session: Session,
        *,
        user_id: int,
        token_id: str,
        expires_at: datetime,
        device_info: DeviceInfo | None = None,
        token: str | None = None,
        last_used_at: datetime | None = None,
    ) -> RefreshTokenRecord:
        """Insert within the caller's transaction (registration commits user and token together)."""
        device = device_info or DeviceInfo()
        model = RefreshTokenModel(
            jti=token_id,
            user_id=user_id,
            token_hash=_sha256(token) if token else None,
            issued_at=self._clock(),
            expires_at=expires_at,
            revoked=False,
            revoked_at=None,
            replaced_by_jti=None,
            reason=None,
            last_used_at=last_used_at,
            user_agent=_clip(device.user_agent, 512),
            ip_address=_clip(device.ip, 64),
        )

        try:
            RefreshTokenRepository(session).add(model)
        except IntegrityError as e:
            raise DuplicateTokenIdError(token_id) from e

        return RefreshTokenRecord.from_model(model)

    def find_live_by_token_id(self, token_id: str, *, now: datetime | None = None) -> RefreshTokenRecord | None:
        with self._db.session("refresh_token.find_live") as session:
            model = RefreshTokenRepository(session).get_live_by_jti(token_id, now=now or self._clock())
            return RefreshTokenRecord.from_model(model) if model else None

    def get(self, token_id: str) -> RefreshTokenRecord | None:
        with self._db.session("refresh_token.get") as session:
            model = RefreshTokenRepository(session).get_by_jti(token_id)
            return RefreshTokenRecord.from_model(model) if model else None

    def consume(
        self,
        token_id: str,
        *,
        user_id: int,
        replaced_by_jti: str,
        now: datetime | None = None,
    ) -> RefreshTokenRecord | None:
        """Atomically find-live-and-revoke for rotation.

        Returns the revoked record when this call won, ``None`` when the token was
        not live (never issued, revoked, rotated by a concurrent call, expired, or
        owned by another subject).
        """
        now = now or self._clock()
        with self._db.session("refresh_token.consume") as session:
            repo = RefreshTokenRepository(session)
            won = repo.revoke_if_live(
                jti=token_id, now=now, reason="rotated", replaced_by_jti=replaced_by_jti, user_id=user_id
            )
            if not won:
                return None
            return RefreshTokenRecord.from_model(repo.get_by_jti(token_id))

    def revoke(self, token_id: str, *, reason: str = "logout") -> bool:
        with self._db.session("refresh_token.revoke") as session:
            return RefreshTokenRepository(session).revoke(jti=token_id, now=self._clock(), reason=reason)

    def revoke_for_user(self, *, user_id: int, token_id: str, reason: str = "logout") -> bool:
        with self._db.session("refresh_token.revoke_for_user") as session:
            return RefreshTokenRepository(session).revoke_if_live(
                jti=token_id, now=self._clock(), reason=reason, user_id=user_id
            )

    def revoke_all_for_user(self, user_id: int, *, reason: str = "logout_all") -> int:
        with self._db.session("refresh_token.revoke_all") as session:
            return RefreshTokenRepository(session).revoke_all_for_user(
                user_id=user_id, now=self._clock(), reason=reason
            )

    def list_live_for_user(self, user_id: int) -> list[RefreshTokenRecord]:
        with self._db.session("refresh_token.list_live") as session:
            models = RefreshTokenRepository(session).list_live_for_user(user_id, now=self._clock())
            return [RefreshTokenRecord.from_model(m) for m in models]

    def purge(self, *, revoked_retention: timedelta) -> int:
        now = self._clock()
        with self._db.session("refresh_token.purge") as session:
            count = RefreshTokenRepository(session).delete_stale(now=now, revoked_before=now - revoked_retention)

        if count:
            logger.info("refresh_tokens_purged", purged_count=count)
        return count
