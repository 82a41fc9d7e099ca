# session_api/api/middlewares/auth_middleware.py

from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, TypeVar

from flask import g, request

from session_api.api.dependencies import get_services
from session_api.core.exceptions import UnauthorizedError
from session_api.entities.user import User

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class AuthContext:
    user: User

    @property
    def user_id(self) -> int:
        return self.user.id


def _get_bearer_token() -> str:
    auth = request.headers.get("Authorization", "")
    parts = auth.split()
    if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1]:
        return parts[1]
    raise UnauthorizedError("Not authorized, no token.")


def current_auth() -> AuthContext:
    auth = getattr(g, "auth", None)
    if auth is None:
        raise UnauthorizedError("Not authorized, no token.")
    return auth


def require_auth(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = _get_bearer_token()
        services = get_services()

        # UnauthorizedError -> 401, UnavailableError -> 503 (error_handler)
        user = services.sessions.verify_access(token)
        g.auth = AuthContext(user=user)

        # decision made; bookkeeping must not delay or fail the request
        services.activity.schedule(user.id)

        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
