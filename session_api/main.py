# session_api/main.py
from __future__ import annotations

import atexit

import click
from flask import Flask
from flask_cors import CORS

from session_api.api.dependencies import EXTENSION_KEY
from session_api.api.middlewares.error_handler import register_error_handlers
from session_api.api.routes import register_routes
from session_api.config.flask_config import configure_app
from session_api.config.logging_config import configure_logging, get_logger
from session_api.config.settings import Settings, load_settings
from session_api.services.container import ServiceContainer, build_services

logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> Flask:
    # loaded once; nothing below reads the environment again
    settings = settings or load_settings()
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)

    app = Flask(__name__)

    auth_prefix = settings.auth_prefix
    CORS(
        app,
        resources={rf"{auth_prefix}/*": {"origins": settings.cors_origin_list}},
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "DELETE", "OPTIONS"],
        supports_credentials=True,
    )

    configure_app(app, settings)

    # raises ConfigurationError when JWT_SECRET is missing
    services = build_services(settings)
    app.extensions[EXTENSION_KEY] = services
    atexit.register(services.close)

    register_routes(app, api_prefix=settings.api_prefix)
    register_error_handlers(app)
    register_commands(app, services)

    logger.info("app_started", environment=settings.environment, auth_prefix=auth_prefix)
    return app


def register_commands(app: Flask, services: ServiceContainer) -> None:
    @app.cli.command("purge-tokens")
    def purge_tokens() -> None:
        """Delete expired and long-revoked refresh tokens."""
        count = services.cleanup.purge()
        click.echo(f"purged {count} refresh token(s)")

    @app.cli.command("create-schema")
    def create_schema() -> None:
        """Create the database tables."""
        services.database.create_all()
        click.echo("schema created")
