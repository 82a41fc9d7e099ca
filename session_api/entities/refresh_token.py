# session_api/entities/refresh_token.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DeviceInfo:
    user_agent: Optional[str] = None
    ip: Optional[str] = None


@dataclass(frozen=True)
class RefreshTokenRecord:
    token_id: str
    user_id: int
    issued_at: datetime
    expires_at: datetime
    revoked: bool
    revoked_at: Optional[datetime]
    reason: Optional[str]
    replaced_by_jti: Optional[str]
    last_used_at: Optional[datetime]
    device_info: DeviceInfo

    def is_live(self, now: datetime) -> bool:
        # exclusive boundary: a token at exactly expires_at is expired
        return not self.revoked and self.expires_at > now

    @classmethod
    def from_model(cls, model) -> "RefreshTokenRecord":
        return cls(
            token_id=model.jti,
            user_id=int(model.user_id),
            issued_at=model.issued_at,
            expires_at=model.expires_at,
            revoked=bool(model.revoked),
            revoked_at=model.revoked_at,
            reason=model.reason,
            replaced_by_jti=model.replaced_by_jti,
            last_used_at=model.last_used_at,
            device_info=DeviceInfo(user_agent=model.user_agent, ip=model.ip_address),
        )
