import pytest

from session_api.config.settings import Settings
from session_api.main import create_app
from session_api.services.container import build_services

TEST_SECRET = "test-secret-key-for-testing-only-do-not-use-in-production"
TEST_PASSWORD = "Passw0rd!"


@pytest.fixture
def settings(tmp_path):
    """Settings backed by a file SQLite database and a cheap hash cost."""
    return Settings(
        jwt_secret=TEST_SECRET,
        db_url=f"sqlite:///{tmp_path / 'sessions.db'}",
        db_auto_create=True,
        db_timeout_seconds=10,
        password_hash_iterations=1_000,
        jwt_access_minutes=15,
        jwt_refresh_minutes=60 * 24 * 7,
        activity_workers=1,
        log_level="WARNING",
        log_json=False,
    )


@pytest.fixture
def services(settings):
    container = build_services(settings)
    yield container
    container.close()


@pytest.fixture
def session_service(services):
    return services.sessions


@pytest.fixture
def app(settings):
    flask_app = create_app(settings)
    flask_app.config["TESTING"] = True
    yield flask_app
    flask_app.extensions["session_api"].close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_services(app):
    return app.extensions["session_api"]
