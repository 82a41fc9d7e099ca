# session_api/infrastructure/database/models/refresh_token_model.py

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, CHAR, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from session_api.infrastructure.database.base_model import BaseModel, PrimaryKey


class RefreshTokenModel(BaseModel):
    __tablename__ = "tbRefreshTokens"
    __table_args__ = (
        Index("ix_tbRefreshTokens_user_revoked", "user_id", "revoked"),
    )

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)

    # revocation handle, embedded in the envelope as "jti"
    jti: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbUsers.id"), nullable=False)

    # sha256 of the signed envelope; the raw string is never stored
    token_hash: Mapped[str] = mapped_column(CHAR(64), nullable=True, unique=True)

    issued_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    revoked_at: Mapped[datetime] = mapped_column(DateTime, nullable=True)
    replaced_by_jti: Mapped[str] = mapped_column(String(64), nullable=True)
    reason: Mapped[str] = mapped_column(String(100), nullable=True)

    last_used_at: Mapped[datetime] = mapped_column(DateTime, nullable=True)
    user_agent: Mapped[str] = mapped_column(String(512), nullable=True)
    ip_address: Mapped[str] = mapped_column(String(64), nullable=True)
