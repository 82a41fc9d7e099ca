# session_api/api/routes/auth_routes.py
from flask import Blueprint, jsonify, request

from session_api.api.dependencies import device_info_from_request, get_services
from session_api.api.middlewares.auth_middleware import current_auth, require_auth
from session_api.api.schemas.auth_schema import (
    AuthResponse,
    LoginRequest,
    LogoutAllResponse,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    RevokeSessionResponse,
    SessionResponse,
    SessionsListResponse,
    TokenPairResponse,
    UserResponse,
    VerifyResponse,
)
from session_api.core.exceptions import UnauthorizedError
from session_api.entities.token_claims import AuthResult

bp_auth = Blueprint("auth", __name__)


def _auth_response(result: AuthResult) -> dict:
    return AuthResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        user=UserResponse.from_entity(result.user),
    ).to_json()


def _refresh_cookie() -> str | None:
    return request.cookies.get(get_services().settings.refresh_cookie_name) or None


@bp_auth.post("/register")
def register():
    payload = RegisterRequest.model_validate(request.get_json(force=True))

    result = get_services().sessions.register(
        email=payload.email,
        password=payload.password,
        device_info=device_info_from_request(),
    )
    return jsonify(_auth_response(result)), 201


@bp_auth.post("/login")
def login():
    payload = LoginRequest.model_validate(request.get_json(force=True))

    result = get_services().sessions.login(
        email=payload.email,
        password=payload.password,
        device_info=device_info_from_request(),
    )
    return jsonify(_auth_response(result)), 200


@bp_auth.post("/refresh")
def refresh():
    body = request.get_json(silent=True)
    payload = RefreshRequest.model_validate(body if isinstance(body, dict) else {})
    token = payload.token or _refresh_cookie()
    if not token:
        raise UnauthorizedError("Refresh token is required.")

    pair = get_services().sessions.refresh(token, device_info=device_info_from_request())
    return jsonify(TokenPairResponse(access_token=pair.access_token, refresh_token=pair.refresh_token).to_json()), 200


@bp_auth.post("/logout")
def logout():
    # 200 no matter what was (or was not) sent
    body = request.get_json(silent=True)
    token = None
    if isinstance(body, dict):
        candidate = body.get("refreshToken") or body.get("token")
        token = candidate if isinstance(candidate, str) else None

    get_services().sessions.logout(token or _refresh_cookie())
    return jsonify(MessageResponse(message="Logged out successfully.").to_json()), 200


@bp_auth.post("/logout-all")
@require_auth
def logout_all():
    count = get_services().sessions.logout_all(current_auth().user_id)
    return jsonify(LogoutAllResponse(revoked_count=count).to_json()), 200


@bp_auth.get("/verify")
@require_auth
def verify():
    user = current_auth().user
    return jsonify(VerifyResponse(user=UserResponse.from_entity(user)).to_json()), 200


@bp_auth.get("/sessions")
@require_auth
def list_sessions():
    records = get_services().sessions.list_sessions(current_auth().user_id)
    response = SessionsListResponse(sessions=[SessionResponse.from_record(r) for r in records])
    return jsonify(response.to_json()), 200


@bp_auth.delete("/sessions/<token_id>")
@require_auth
def revoke_session(token_id: str):
    revoked = get_services().sessions.revoke_session(user_id=current_auth().user_id, token_id=token_id)
    return jsonify(RevokeSessionResponse(revoked=revoked).to_json()), 200
