# session_api/api/routes/health_routes.py
from flask import Blueprint, jsonify
from sqlalchemy import text

from session_api.api.dependencies import get_services

bp_health = Blueprint("health", __name__)


@bp_health.get("")
def health():
    return jsonify({"status": "ok"}), 200


@bp_health.get("/db")
def health_db():
    # UnavailableError -> 503
    with get_services().database.session("health.db") as session:
        session.execute(text("select 1"))
    return jsonify({"db": "ok"}), 200
