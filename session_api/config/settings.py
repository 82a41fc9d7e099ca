# session_api/config/settings.py

from urllib.parse import quote_plus

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL by default; db_url wins when set (sqlite in tests).
    db_url: str | None = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "sessions"
    db_user: str = "postgres"
    db_password: str = ""
    db_timeout_seconds: int = 5
    db_auto_create: bool = False

    environment: str = "development"
    debug: bool = False

    api_prefix: str = "/api"
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    jwt_secret: str = ""
    jwt_issuer: str = "session-api"
    jwt_audience: str = "session-api-clients"
    jwt_access_minutes: int = 15
    jwt_refresh_minutes: int = 60 * 24 * 7

    password_hash_iterations: int = 600_000

    refresh_cookie_name: str = "refresh_token"
    revoked_retention_days: int = 30
    activity_workers: int = 2

    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("db_host", "db_name", "db_user", "db_password", "jwt_secret", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return v.strip().strip('"').strip("'")
        return v

    @field_validator("jwt_access_minutes", "jwt_refresh_minutes", "password_hash_iterations")
    @classmethod
    def positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @property
    def database_url(self) -> str:
        if self.db_url:
            return self.db_url

        user = quote_plus(self.db_user)
        password = quote_plus(self.db_password)
        return f"postgresql+psycopg2://{user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def auth_prefix(self) -> str:
        return f"{self.api_prefix.rstrip('/')}/auth"


def load_settings() -> Settings:
    return Settings()
