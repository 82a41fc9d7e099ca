# session_api/services/container.py

from dataclasses import dataclass

from session_api.config.settings import Settings
from session_api.infrastructure.database.session import Database
from session_api.infrastructure.security.jwt_provider import JwtProvider
from session_api.infrastructure.security.password_hasher import PasswordHasher
from session_api.services.activity_tracker import ActivityTracker
from session_api.services.refresh_token_store import RefreshTokenStore
from session_api.services.session_service import SessionService
from session_api.services.token_cleanup_service import TokenCleanupService
from session_api.services.user_service import UserService


@dataclass(frozen=True)
class ServiceContainer:
    settings: Settings
    database: Database
    jwt_provider: JwtProvider
    users: UserService
    store: RefreshTokenStore
    sessions: SessionService
    activity: ActivityTracker
    cleanup: TokenCleanupService

    def close(self) -> None:
        self.activity.shutdown(wait=True)
        self.database.dispose()


def build_services(settings: Settings) -> ServiceContainer:
    # JwtProvider first: a missing secret must abort startup before anything else
    jwt_provider = JwtProvider(settings)

    database = Database(settings)
    if settings.db_auto_create:
        database.create_all()

    users = UserService(database, PasswordHasher(iterations=settings.password_hash_iterations))
    store = RefreshTokenStore(database)

    return ServiceContainer(
        settings=settings,
        database=database,
        jwt_provider=jwt_provider,
        users=users,
        store=store,
        sessions=SessionService(jwt_provider=jwt_provider, users=users, store=store),
        activity=ActivityTracker(users, max_workers=settings.activity_workers),
        cleanup=TokenCleanupService(store, revoked_retention_days=settings.revoked_retention_days),
    )
