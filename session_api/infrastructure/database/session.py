# session_api/infrastructure/database/session.py

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import InterfaceError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from session_api.config.logging_config import get_logger
from session_api.config.settings import Settings
from session_api.core.exceptions import UnavailableError
from session_api.infrastructure.database.base_model import BaseModel

logger = get_logger(__name__)


def _connect_args(settings: Settings) -> dict:
    url = settings.database_url
    if url.startswith("sqlite"):
        # busy timeout, in seconds
        return {"timeout": settings.db_timeout_seconds, "check_same_thread": False}
    if url.startswith("postgresql"):
        return {
            "connect_timeout": settings.db_timeout_seconds,
            "options": f"-c statement_timeout={settings.db_timeout_seconds * 1000}",
        }
    return {}


class Database:
    def __init__(self, settings: Settings) -> None:
        engine_kwargs = {"pool_pre_ping": True, "connect_args": _connect_args(settings)}
        if not settings.database_url.startswith("sqlite"):
            # sqlite pools have no checkout queue
            engine_kwargs["pool_timeout"] = settings.db_timeout_seconds

        self._engine: Engine = create_engine(settings.database_url, echo=False, **engine_kwargs)
        self._session_factory = sessionmaker(
            bind=self._engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_all(self) -> None:
        import session_api.infrastructure.database.models  # noqa: F401

        BaseModel.metadata.create_all(self._engine)

    def dispose(self) -> None:
        self._engine.dispose()

    @contextmanager
    def session(self, operation: str = "db") -> Iterator[Session]:
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except (OperationalError, InterfaceError, PoolTimeoutError) as e:
            session.rollback()
            logger.error("store_unavailable", operation=operation, error=type(e).__name__)
            raise UnavailableError() from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
