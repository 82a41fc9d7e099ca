# session_api/services/user_service.py

from datetime import datetime
from typing import Callable

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from session_api.core.exceptions import ConflictError, InvalidCredentialsError, ValidationError
from session_api.core.time import utcnow
from session_api.entities.user import User
from session_api.infrastructure.database.models.user_model import UserModel
from session_api.infrastructure.database.session import Database
from session_api.infrastructure.security.password_hasher import PasswordHasher
from session_api.repositories.user_repository import UserRepository

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 200

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(email: str | None) -> str:
    if not email or not isinstance(email, str):
        raise ValidationError("Email is required.")

    candidate = email.strip().lower()
    try:
        _email_adapter.validate_python(candidate)
    except PydanticValidationError as e:
        raise ValidationError("Please use a valid email address.") from e
    return candidate


def validate_password(password: str | None) -> str:
    if not password or not isinstance(password, str):
        raise ValidationError("Password is required.")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long.")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_LENGTH} characters long.")
    if not any(c.isalpha() for c in password) or not any(c.isdigit() for c in password):
        raise ValidationError("Password must contain letters and digits.")
    try:
        password.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValidationError("Password contains invalid characters.") from e
    return password


class UserService:
    def __init__(
        self,
        database: Database,
        hasher: PasswordHasher,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._db = database
        self._hasher = hasher
        self._clock = clock
        self._dummy_hash: str | None = None

    def create_user(
        self,
        *,
        email: str,
        password: str,
        on_created: Callable[[Session, User], None] | None = None,
    ) -> User:
        """Persist a new user.

        ``on_created`` runs inside the same transaction once the user id is
        known; if it raises, the user is rolled back with it.
        """
        email = normalize_email(email)
        validate_password(password)

        with self._db.session("user.exists") as session:
            if UserRepository(session).exists_by_email(email):
                raise ConflictError("User already exists with this email.")

        password_hash = self._hasher.hash_password(password)

        model = UserModel(
            email=email,
            password_hash=password_hash,
            created_at=self._clock(),
            updated_at=None,
            last_login=None,
            last_active_at=None,
            is_deleted=False,
        )
        with self._db.session("user.create") as session:
            try:
                UserRepository(session).add(model)
            except IntegrityError as e:
                # lost a race against a concurrent registration
                raise ConflictError("User already exists with this email.") from e

            user = User.from_model(model)
            if on_created is not None:
                on_created(session, user)

        return user

    def authenticate(self, *, email: str, password: str) -> User:
        try:
            email = normalize_email(email)
        except ValidationError as e:
            raise InvalidCredentialsError() from e

        with self._db.session("user.get_by_email") as session:
            model = UserRepository(session).get_by_email(email)

        if model is None:
            # same cost as a real check so timing does not reveal unknown emails
            self._hasher.verify_password(password, self._get_dummy_hash())
            raise InvalidCredentialsError()

        if not self._hasher.verify_password(password, model.password_hash):
            raise InvalidCredentialsError()

        now = self._clock()
        with self._db.session("user.touch_last_login") as session:
            UserRepository(session).touch_last_login(model.id, now=now)
        model.last_login = now

        return User.from_model(model)

    def get_active_user(self, user_id: int) -> User | None:
        with self._db.session("user.get_by_id") as session:
            model = UserRepository(session).get_by_id(user_id)
            return User.from_model(model) if model else None

    def touch_last_active(self, user_id: int) -> bool:
        with self._db.session("user.touch_last_active") as session:
            return UserRepository(session).touch_last_active(user_id, now=self._clock())

    def delete_user(self, user_id: int) -> bool:
        with self._db.session("user.delete") as session:
            return UserRepository(session).soft_delete(user_id)

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self._hasher.hash_password("dummy-password-for-timing")
        return self._dummy_hash
