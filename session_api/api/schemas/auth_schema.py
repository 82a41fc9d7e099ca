# session_api/api/schemas/auth_schema.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from session_api.api.schemas._datetime_serializer import serialize_dt
from session_api.entities.refresh_token import RefreshTokenRecord
from session_api.entities.user import User


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


# -------------------------
# Requests
# -------------------------

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=200)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=200)


class RefreshRequest(CamelModel):
    token: str | None = None

    @field_validator("token", mode="before")
    @classmethod
    def ignore_non_string(cls, v):
        # a non-string token is treated as absent
        return v if isinstance(v, str) else None


# -------------------------
# Responses
# -------------------------

class UserResponse(CamelModel):
    id: int
    email: EmailStr
    created_at: datetime
    last_login: datetime | None = None

    @field_serializer("created_at", "last_login")
    def _dt(self, v: datetime | None) -> str | None:
        return serialize_dt(v)

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(id=user.id, email=user.email, created_at=user.created_at, last_login=user.last_login)


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"


class AuthResponse(TokenPairResponse):
    user: UserResponse


class MessageResponse(CamelModel):
    message: str


class LogoutAllResponse(CamelModel):
    revoked_count: int


class VerifyResponse(CamelModel):
    valid: bool = True
    user: UserResponse


class DeviceInfoResponse(CamelModel):
    user_agent: str | None = None
    ip: str | None = None


class SessionResponse(CamelModel):
    token_id: str
    issued_at: datetime
    expires_at: datetime
    last_used_at: datetime | None = None
    device_info: DeviceInfoResponse

    @field_serializer("issued_at", "expires_at", "last_used_at")
    def _dt(self, v: datetime | None) -> str | None:
        return serialize_dt(v)

    @classmethod
    def from_record(cls, record: RefreshTokenRecord) -> "SessionResponse":
        return cls(
            token_id=record.token_id,
            issued_at=record.issued_at,
            expires_at=record.expires_at,
            last_used_at=record.last_used_at,
            device_info=DeviceInfoResponse(
                user_agent=record.device_info.user_agent,
                ip=record.device_info.ip,
            ),
        )


class SessionsListResponse(CamelModel):
    sessions: list[SessionResponse]


class RevokeSessionResponse(CamelModel):
    revoked: bool
