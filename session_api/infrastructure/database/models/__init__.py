# session_api/infrastructure/database/models/__init__.py

from session_api.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from session_api.infrastructure.database.models.user_model import UserModel

__all__ = ["RefreshTokenModel", "UserModel"]
