"""Application settings and configuration helpers."""
from enum import Enum
from functools import lru_cache
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class AuthMode(str, Enum):
    """How credentials are stored and checked."""

    HASHED = "hashed"
    DEVICE = "device"


class Settings(BaseModel):
    """Runtime configuration loaded from environment variables."""

    database_url: str = Field(
        default="sqlite+aiosqlite:///./accounts.db", alias="DATABASE_URL"
    )
    auth_mode: AuthMode = Field(default=AuthMode.HASHED, alias="AUTH_MODE")
    db_pool: bool = Field(default=True, alias="DB_POOL")
    db_pool_size: int = Field(default=10, alias="DB_POOL_SIZE")
    db_connect_timeout: int = Field(default=60, alias="DB_CONNECT_TIMEOUT")
    password_min_length: int = Field(default=6, alias="PASSWORD_MIN_LENGTH")
    username_max_length: int = Field(default=50)
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def device_bound(self) -> bool:
        return self.auth_mode is AuthMode.DEVICE


def _split_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    defaults = Settings.model_fields
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults["database_url"].default),
        auth_mode=os.getenv("AUTH_MODE", AuthMode.HASHED.value).strip().lower(),
        db_pool=_env_flag(os.getenv("DB_POOL", "true")),
        db_pool_size=int(os.getenv("DB_POOL_SIZE", defaults["db_pool_size"].default)),
        db_connect_timeout=int(
            os.getenv("DB_CONNECT_TIMEOUT", defaults["db_connect_timeout"].default)
        ),
        password_min_length=int(
            os.getenv("PASSWORD_MIN_LENGTH", defaults["password_min_length"].default)
        ),
        log_level=os.getenv("LOG_LEVEL", defaults["log_level"].default),
        host=os.getenv("HOST", defaults["host"].default),
        port=int(os.getenv("PORT", defaults["port"].default)),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
    )
