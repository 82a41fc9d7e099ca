# session_api/entities/token_claims.py
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from session_api.entities.user import User


@dataclass(frozen=True)
class AccessClaims:
    subject_user_id: int
    issued_at: datetime
    expires_at: datetime
    kind: str = "access"


@dataclass(frozen=True)
class RefreshClaims:
    subject_user_id: int
    token_id: str
    issued_at: datetime
    expires_at: datetime
    kind: str = "refresh"


Claims = Union[AccessClaims, RefreshClaims]


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class AuthResult:
    access_token: str
    refresh_token: str
    user: User
