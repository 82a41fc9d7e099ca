# session_api/core/exceptions.py

class AppError(Exception):
    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationError(AppError):
    def __init__(self, message: str = "Invalid input") -> None:
        super().__init__(message, status_code=400)


class InvalidCredentialsError(AppError):
    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message, status_code=401)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=401)


class InvalidOrExpiredError(AppError):
    def __init__(self, message: str = "Refresh token is invalid or expired") -> None:
        super().__init__(message, status_code=403)


class ConflictError(AppError):
    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=409)


class UnavailableError(AppError):
    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(message, status_code=503)


# Fatal at startup, never rendered per request.
class ConfigurationError(Exception):
    pass


class DuplicateTokenIdError(Exception):
    def __init__(self, token_id: str) -> None:
        super().__init__(f"Refresh token id already exists: {token_id}")
        self.token_id = token_id


# -------------------------
# Token codec
# -------------------------

class TokenError(Exception):
    pass


class InvalidSignatureError(TokenError):
    pass


class TokenExpiredError(TokenError):
    pass


class MalformedTokenError(TokenError):
    pass
