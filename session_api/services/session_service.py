# session_api/services/session_service.py

from datetime import datetime
from uuid import uuid4

from sqlalchemy.orm import Session

from session_api.config.logging_config import get_logger
from session_api.core.exceptions import (
    DuplicateTokenIdError,
    InvalidCredentialsError,
    InvalidOrExpiredError,
    TokenError,
    TokenExpiredError,
    UnauthorizedError,
    UnavailableError,
)
from session_api.entities.refresh_token import DeviceInfo, RefreshTokenRecord
from session_api.entities.token_claims import AuthResult, TokenPair
from session_api.entities.user import User
from session_api.infrastructure.security.jwt_provider import JwtProvider
from session_api.services.refresh_token_store import RefreshTokenStore
from session_api.services.user_service import UserService

logger = get_logger(__name__)


class SessionService:
    """Login, registration, rotation and revocation of token pairs.

    A refresh token lineage moves ISSUED -> LIVE -> ROTATED | REVOKED | EXPIRED.
    Rotation commits the revocation of the presented token before the
    replacement is persisted: a failure in between leaves the client logged
    out, never with two live tokens.
    """

    MAX_ISSUE_ATTEMPTS = 3

    def __init__(
        self,
        *,
        jwt_provider: JwtProvider,
        users: UserService,
        store: RefreshTokenStore,
    ) -> None:
        self._jwt = jwt_provider
        self._users = users
        self._store = store

    # -------------------------
    # Issuance
    # -------------------------

    def register(self, *, email: str, password: str, device_info: DeviceInfo | None = None) -> AuthResult:
        pairs: list[TokenPair] = []

        def issue_first_pair(session: Session, user: User) -> None:
            token_id = uuid4().hex
            refresh_token = self._jwt.issue_refresh_token(user.id, token_id)
            self._store.add_in_session(
                session,
                user_id=user.id,
                token_id=token_id,
                expires_at=self._jwt.refresh_expiry(refresh_token),
                device_info=device_info,
                token=refresh_token,
            )
            pairs.append(TokenPair(access_token=self._jwt.issue_access_token(user.id), refresh_token=refresh_token))

        # user and first refresh token commit together, so a failed register can be retried
        try:
            user = self._users.create_user(email=email, password=password, on_created=issue_first_pair)
        except DuplicateTokenIdError as e:
            raise UnavailableError("Could not issue a refresh token.") from e
        logger.info("user_registered", user_id=user.id)

        pair = pairs[0]
        return AuthResult(access_token=pair.access_token, refresh_token=pair.refresh_token, user=user)

    def login(self, *, email: str, password: str, device_info: DeviceInfo | None = None) -> AuthResult:
        try:
            user = self._users.authenticate(email=email, password=password)
        except InvalidCredentialsError:
            logger.info("login_failed")
            raise

        pair = self._issue_pair(user.id, device_info)
        logger.info("login_succeeded", user_id=user.id)
        return AuthResult(access_token=pair.access_token, refresh_token=pair.refresh_token, user=user)

    def refresh(self, presented_token: str | None, *, device_info: DeviceInfo | None = None) -> TokenPair:
        if not presented_token:
            raise UnauthorizedError("Refresh token is required.")

        try:
            claims = self._jwt.decode_refresh(presented_token)
        except TokenError as e:
            logger.info("refresh_rejected", reason=type(e).__name__)
            raise InvalidOrExpiredError() from e

        new_token_id = uuid4().hex
        consumed = self._store.consume(
            claims.token_id, user_id=claims.subject_user_id, replaced_by_jti=new_token_id
        )
        if consumed is None:
            # replayed, revoked, expired in the store, or lost a concurrent rotation
            logger.warning(
                "refresh_rejected", reason="not_live", token_id=claims.token_id, user_id=claims.subject_user_id
            )
            raise InvalidOrExpiredError()

        user = self._users.get_active_user(consumed.user_id)
        if user is None:
            logger.warning("refresh_rejected", reason="user_missing", user_id=consumed.user_id)
            raise InvalidOrExpiredError()

        device = device_info if device_info and (device_info.user_agent or device_info.ip) else consumed.device_info
        try:
            pair = self._issue_pair(user.id, device, token_id=new_token_id, last_used_at=consumed.last_used_at)
        except UnavailableError:
            logger.error("refresh_issue_failed", operation="refresh", user_id=user.id, token_id=claims.token_id)
            raise

        logger.info("refresh_rotated", user_id=user.id, token_id=claims.token_id, replaced_by_jti=new_token_id)
        return pair

    def _issue_pair(
        self,
        user_id: int,
        device_info: DeviceInfo | None,
        *,
        token_id: str | None = None,
        last_used_at: datetime | None = None,
    ) -> TokenPair:
        for attempt in range(self.MAX_ISSUE_ATTEMPTS):
            tid = token_id if (token_id and attempt == 0) else uuid4().hex
            refresh_token = self._jwt.issue_refresh_token(user_id, tid)
            expires_at = self._jwt.refresh_expiry(refresh_token)

            try:
                self._store.create(
                    user_id=user_id,
                    token_id=tid,
                    expires_at=expires_at,
                    device_info=device_info,
                    token=refresh_token,
                    last_used_at=last_used_at,
                )
            except DuplicateTokenIdError:
                logger.warning("refresh_token_id_collision", user_id=user_id, attempt=attempt + 1)
                continue

            access_token = self._jwt.issue_access_token(user_id)
            return TokenPair(access_token=access_token, refresh_token=refresh_token)

        raise UnavailableError("Could not issue a refresh token.")

    # -------------------------
    # Revocation
    # -------------------------

    def logout(self, presented_token: str | None) -> None:
        # best effort, the caller always sees success
        if not presented_token:
            return

        try:
            claims = self._jwt.decode_refresh(presented_token)
        except TokenError:
            return

        try:
            revoked = self._store.revoke(claims.token_id, reason="logout")
        except UnavailableError:
            logger.error("logout_revoke_failed", operation="logout", user_id=claims.subject_user_id)
            return

        if revoked:
            logger.info("logout", user_id=claims.subject_user_id, token_id=claims.token_id)

    def logout_all(self, user_id: int) -> int:
        count = self._store.revoke_all_for_user(user_id, reason="logout_all")
        logger.info("logout_all", user_id=user_id, revoked_count=count)
        return count

    def list_sessions(self, user_id: int) -> list[RefreshTokenRecord]:
        return self._store.list_live_for_user(user_id)

    def revoke_session(self, *, user_id: int, token_id: str) -> bool:
        revoked = self._store.revoke_for_user(user_id=user_id, token_id=token_id, reason="logout")
        if revoked:
            logger.info("session_revoked", user_id=user_id, token_id=token_id)
        return revoked

    # -------------------------
    # Verification
    # -------------------------

    def verify_access(self, presented_token: str | None) -> User:
        if not presented_token:
            raise UnauthorizedError("Not authorized, no token.")

        try:
            claims = self._jwt.decode_access(presented_token)
        except TokenExpiredError as e:
            raise UnauthorizedError("Not authorized, token expired.") from e
        except TokenError as e:
            raise UnauthorizedError("Not authorized, invalid token.") from e

        # re-resolved every time: a deleted user must not keep a valid identity
        user = self._users.get_active_user(claims.subject_user_id)
        if user is None:
            raise UnauthorizedError("Not authorized, invalid token.")
        return user
