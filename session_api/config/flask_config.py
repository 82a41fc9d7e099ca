# session_api/config/flask_config.py

from flask import Flask

from session_api.config.settings import Settings


def configure_app(app: Flask, settings: Settings) -> None:
    app.config["ENV"] = settings.environment
    app.config["DEBUG"] = settings.debug
    app.config["SETTINGS"] = settings
