"""
Environment-aware configuration.
Flask config classes read the environment (and .env) once; AuthSettings
is the frozen view of the auth-related keys handed to the components.
"""
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Tuple

from dotenv import load_dotenv

from utils.exceptions import SigningError

load_dotenv()  # Read .env if present


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _env_seconds(name: str, default: int) -> timedelta:
    return timedelta(seconds=int(os.getenv(name, str(default))))


def _env_int(name: str):
    value = os.getenv(name)
    return int(value) if value else None


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    SWAGGER_ENABLED = _env_bool("SWAGGER_ENABLED", "true")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///auth.db")
    DATABASE_ECHO = _env_bool("DATABASE_ECHO")
    STORAGE_TIMEOUT_SECONDS = int(os.getenv("STORAGE_TIMEOUT_SECONDS", "5"))

    # jwt configurations
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me-please-32bytes!")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "jwt-auth-api")
    JWT_LEEWAY_SECONDS = int(os.getenv("JWT_LEEWAY_SECONDS", "0"))
    ACCESS_TOKEN_EXPIRES = _env_seconds("ACCESS_TOKEN_EXPIRES_SECONDS", 900)
    REFRESH_TOKEN_EXPIRES = _env_seconds("REFRESH_TOKEN_EXPIRES_SECONDS", 7 * 24 * 3600)

    ACCESS_TOKEN_COOKIE_NAME = os.getenv("ACCESS_TOKEN_COOKIE_NAME", "access_token")
    REFRESH_TOKEN_COOKIE_NAME = os.getenv("REFRESH_TOKEN_COOKIE_NAME", "refresh_token")
    COOKIE_SECURE = _env_bool("COOKIE_SECURE")
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Lax")
    AUTH_EXCLUDED_PREFIXES = os.getenv("AUTH_EXCLUDED_PREFIXES", "/api/v1/auth/").split(",")

    PASSWORD_HASH_TIME_COST = _env_int("PASSWORD_HASH_TIME_COST")
    PASSWORD_HASH_MEMORY_COST = _env_int("PASSWORD_HASH_MEMORY_COST")
    PASSWORD_HASH_PARALLELISM = _env_int("PASSWORD_HASH_PARALLELISM")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True


class TestingConfig(BaseConfig):
    TESTING = True
    SWAGGER_ENABLED = False
    DATABASE_URL = "sqlite://"
    JWT_SECRET = "test-secret-with-at-least-thirty-two-bytes"
    # cheap hashing keeps the suite fast
    PASSWORD_HASH_TIME_COST = 1
    PASSWORD_HASH_MEMORY_COST = 8
    PASSWORD_HASH_PARALLELISM = 1


class ProductionConfig(BaseConfig):
    DEBUG = False
    # no fallback: startup fails with SigningError when unset
    JWT_SECRET = os.getenv("JWT_SECRET")
    COOKIE_SECURE = _env_bool("COOKIE_SECURE", "true")


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig


@dataclass(frozen=True)
class AuthSettings:
    jwt_secret: str | None
    jwt_algorithm: str
    jwt_issuer: str | None
    jwt_leeway_seconds: int
    access_token_ttl: timedelta
    refresh_token_ttl: timedelta
    access_token_cookie_name: str
    refresh_token_cookie_name: str
    cookie_secure: bool
    cookie_samesite: str
    excluded_prefixes: Tuple[str, ...]

    @classmethod
    def from_config(cls, config) -> "AuthSettings":
        settings = cls(
            jwt_secret=config.get("JWT_SECRET"),
            jwt_algorithm=config.get("JWT_ALGORITHM", "HS256"),
            jwt_issuer=config.get("JWT_ISSUER") or None,
            jwt_leeway_seconds=int(config.get("JWT_LEEWAY_SECONDS", 0)),
            access_token_ttl=config["ACCESS_TOKEN_EXPIRES"],
            refresh_token_ttl=config["REFRESH_TOKEN_EXPIRES"],
            access_token_cookie_name=config.get("ACCESS_TOKEN_COOKIE_NAME", "access_token"),
            refresh_token_cookie_name=config.get("REFRESH_TOKEN_COOKIE_NAME", "refresh_token"),
            cookie_secure=bool(config.get("COOKIE_SECURE", False)),
            cookie_samesite=config.get("COOKIE_SAMESITE", "Lax"),
            excluded_prefixes=tuple(
                p.strip() for p in config.get("AUTH_EXCLUDED_PREFIXES", []) if p.strip()
            ),
        )
        if settings.access_token_ttl.total_seconds() <= 0:
            raise SigningError("ACCESS_TOKEN_EXPIRES must be positive")
        if settings.refresh_token_ttl.total_seconds() <= 0:
            raise SigningError("REFRESH_TOKEN_EXPIRES must be positive")
        return settings
