# session_api/repositories/refresh_token_repository.py

from datetime import datetime

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.orm import Session

from session_api.core.base_repository import BaseRepository
from session_api.infrastructure.database.models.refresh_token_model import RefreshTokenModel


def _live(now: datetime):
    return and_(RefreshTokenModel.revoked.is_(False), RefreshTokenModel.expires_at > now)


class RefreshTokenRepository(BaseRepository[RefreshTokenModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_jti(self, jti: str) -> RefreshTokenModel | None:
        stmt = select(RefreshTokenModel).where(RefreshTokenModel.jti == jti)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_live_by_jti(self, jti: str, *, now: datetime) -> RefreshTokenModel | None:
        stmt = select(RefreshTokenModel).where(RefreshTokenModel.jti == jti, _live(now))
        return self._session.execute(stmt).scalar_one_or_none()

    def list_live_for_user(self, user_id: int, *, now: datetime) -> list[RefreshTokenModel]:
        stmt = (
            select(RefreshTokenModel)
            .where(RefreshTokenModel.user_id == user_id, _live(now))
            .order_by(RefreshTokenModel.issued_at.desc(), RefreshTokenModel.id.desc())
        )
        return list(self._session.execute(stmt).scalars().all())

    def revoke_if_live(
        self,
        *,
        jti: str,
        now: datetime,
        reason: str,
        replaced_by_jti: str | None = None,
        user_id: int | None = None,
    ) -> bool:
        # conditional update: the row count is the compare-and-swap result
        conditions = [RefreshTokenModel.jti == jti, _live(now)]
        if user_id is not None:
            conditions.append(RefreshTokenModel.user_id == user_id)

        values = {"revoked": True, "revoked_at": now, "reason": reason}
        if replaced_by_jti is not None:
            values["replaced_by_jti"] = replaced_by_jti
            values["last_used_at"] = now

        stmt = (
            update(RefreshTokenModel)
            .where(*conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return (result.rowcount or 0) == 1

    def revoke(self, *, jti: str, now: datetime, reason: str) -> bool:
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.jti == jti, RefreshTokenModel.revoked.is_(False))
            .values(revoked=True, revoked_at=now, reason=reason)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return (result.rowcount or 0) > 0

    def revoke_all_for_user(self, *, user_id: int, now: datetime, reason: str) -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.user_id == user_id, _live(now))
            .values(revoked=True, revoked_at=now, reason=reason)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return int(result.rowcount or 0)

    def delete_stale(self, *, now: datetime, revoked_before: datetime) -> int:
        # never touches a row that is still inside its validity window unless revoked
        stmt = (
            delete(RefreshTokenModel)
            .where(
                or_(
                    RefreshTokenModel.expires_at < now,
                    and_(
                        RefreshTokenModel.revoked.is_(True),
                        RefreshTokenModel.revoked_at < revoked_before,
                    ),
                )
            )
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return int(result.rowcount or 0)
