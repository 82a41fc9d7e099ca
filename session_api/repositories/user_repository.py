# session_api/repositories/user_repository.py

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from session_api.core.base_repository import BaseRepository
from session_api.infrastructure.database.models.user_model import UserModel


class UserRepository(BaseRepository[UserModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_email(self, email: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.email == email, UserModel.is_deleted.is_(False))
        return self._session.execute(stmt).scalar_one_or_none()

    def get_by_id(self, user_id: int) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == user_id, UserModel.is_deleted.is_(False))
        return self._session.execute(stmt).scalar_one_or_none()

    def exists_by_email(self, email: str) -> bool:
        # soft-deleted rows still hold the unique email
        stmt = select(UserModel.id).where(UserModel.email == email)
        return self._session.execute(stmt).scalars().first() is not None

    def touch_last_login(self, user_id: int, *, now: datetime) -> None:
        stmt = update(UserModel).where(UserModel.id == user_id).values(last_login=now)
        self._session.execute(stmt)

    def touch_last_active(self, user_id: int, *, now: datetime) -> bool:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id, UserModel.is_deleted.is_(False))
            .values(last_active_at=now)
        )
        result = self._session.execute(stmt)
        return (result.rowcount or 0) > 0

    def soft_delete(self, user_id: int) -> bool:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id, UserModel.is_deleted.is_(False))
            .values(is_deleted=True)
        )
        result = self._session.execute(stmt)
        return (result.rowcount or 0) > 0
