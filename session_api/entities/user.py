# session_api/entities/user.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    id: int
    email: str
    created_at: datetime
    updated_at: Optional[datetime]
    last_login: Optional[datetime]
    last_active_at: Optional[datetime]

    @classmethod
    def from_model(cls, model) -> "User":
        # password_hash deliberately not carried over
        return cls(
            id=int(model.id),
            email=model.email,
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_login=model.last_login,
            last_active_at=model.last_active_at,
        )
