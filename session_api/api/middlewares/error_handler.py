# session_api/api/middlewares/error_handler.py
from flask import Flask, jsonify, request
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from session_api.config.logging_config import get_logger
from session_api.core.exceptions import AppError, UnavailableError

logger = get_logger(__name__)


def _first_error_message(err: PydanticValidationError) -> str:
    errors = err.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()))
    msg = first.get("msg", "invalid value")
    return f"{field}: {msg}" if field else msg


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(UnavailableError)
    def handle_unavailable(err: UnavailableError):
        logger.error("request_unavailable", path=request.path, method=request.method)
        response = jsonify({"error": str(err)})
        response.headers["Retry-After"] = "1"
        return response, err.status_code

    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        return jsonify({"error": str(err)}), err.status_code

    @app.errorhandler(PydanticValidationError)
    def handle_validation_error(err: PydanticValidationError):
        return jsonify({"error": _first_error_message(err)}), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return jsonify({"error": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        logger.exception("unhandled_error", path=request.path, method=request.method)

        if app.config.get("DEBUG"):
            return jsonify({"error": str(err)}), 500

        return jsonify({"error": "Internal server error"}), 500
