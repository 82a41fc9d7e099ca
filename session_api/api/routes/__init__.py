# session_api/api/routes/__init__.py

from flask import Flask

from session_api.api.routes.auth_routes import bp_auth
from session_api.api.routes.health_routes import bp_health


def register_routes(app: Flask, *, api_prefix: str) -> None:
    api_prefix = api_prefix.rstrip("/")

    # health lives outside the api prefix
    app.register_blueprint(bp_health, url_prefix="/health")

    app.register_blueprint(bp_auth, url_prefix=f"{api_prefix}/auth")
