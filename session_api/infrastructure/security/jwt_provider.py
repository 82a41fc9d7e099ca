# session_api/infrastructure/security/jwt_provider.py

from datetime import datetime, timedelta, timezone
from typing import Callable
from uuid import uuid4

import jwt

from session_api.config.settings import Settings
from session_api.core.exceptions import (
    ConfigurationError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from session_api.core.time import from_timestamp
from session_api.entities.token_claims import AccessClaims, Claims, RefreshClaims

ACCESS = "access"
REFRESH = "refresh"


def _aware_utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class JwtProvider:
    def __init__(self, settings: Settings, *, clock: Callable[[], datetime] = _aware_utcnow) -> None:
        if not settings.jwt_secret:
            raise ConfigurationError("JWT_SECRET is not configured.")

        self._secret = settings.jwt_secret
        self._issuer = settings.jwt_issuer
        self._audience = settings.jwt_audience
        self._access_ttl = timedelta(minutes=settings.jwt_access_minutes)
        self._refresh_ttl = timedelta(minutes=settings.jwt_refresh_minutes)
        self._algorithm = "HS256"
        self._clock = clock

    @property
    def refresh_ttl(self) -> timedelta:
        return self._refresh_ttl

    def _issue(self, *, subject: int, token_type: str, ttl: timedelta, jti: str) -> str:
        if not self._secret:
            raise ConfigurationError("JWT_SECRET is not configured.")

        now = self._clock()
        exp = now + ttl

        claims = {
            "iss": self._issuer,
            "aud": self._audience,
            "sub": str(subject),
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
            "jti": jti,
            "typ": token_type,  # "access" | "refresh"
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def issue_access_token(self, user_id: int) -> str:
        # jti only makes two access tokens minted in the same second distinct
        return self._issue(subject=user_id, token_type=ACCESS, ttl=self._access_ttl, jti=uuid4().hex)

    def issue_refresh_token(self, user_id: int, token_id: str) -> str:
        return self._issue(subject=user_id, token_type=REFRESH, ttl=self._refresh_ttl, jti=token_id)

    def refresh_expiry(self, token: str) -> datetime:
        return self.decode_refresh(token).expires_at

    def decode(self, token: str) -> Claims:
        if not token or not isinstance(token, str):
            raise MalformedTokenError("Token is empty.")

        try:
            raw = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": ["exp", "iat", "sub", "jti", "typ"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token expired.") from e
        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureError("Token signature mismatch.") from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError("Token is malformed.") from e

        return self._to_claims(raw)

    def decode_access(self, token: str) -> AccessClaims:
        claims = self.decode(token)
        if not isinstance(claims, AccessClaims):
            raise MalformedTokenError("Expected an access token.")
        return claims

    def decode_refresh(self, token: str) -> RefreshClaims:
        claims = self.decode(token)
        if not isinstance(claims, RefreshClaims):
            raise MalformedTokenError("Expected a refresh token.")
        return claims

    @staticmethod
    def _to_claims(raw: dict) -> Claims:
        try:
            subject = int(raw["sub"])
            issued_at = from_timestamp(raw["iat"])
            expires_at = from_timestamp(raw["exp"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedTokenError("Token claims are malformed.") from e

        kind = raw.get("typ")
        if kind == ACCESS:
            return AccessClaims(subject_user_id=subject, issued_at=issued_at, expires_at=expires_at)

        if kind == REFRESH:
            token_id = raw.get("jti")
            if not isinstance(token_id, str) or not token_id:
                raise MalformedTokenError("Refresh token has no id.")
            return RefreshClaims(
                subject_user_id=subject,
                token_id=token_id,
                issued_at=issued_at,
                expires_at=expires_at,
            )

        raise MalformedTokenError("Unknown token kind.")
