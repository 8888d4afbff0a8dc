import logging
from dataclasses import dataclass

from flask import Flask, current_app
from flasgger import Swagger
from flask_cors import CORS

from .config import AuthSettings, get_config
from .errors import register_error_handlers
from .middleware import RequestAuthenticator
from models.db_storage import DBStorage
from services import AuthenticationFlow, CredentialsAuthenticator, RefreshTokenStore, UserDirectory
from utils.clock import SystemClock
from utils.security import Argon2PasswordHasher, StaticSecretProvider, TokenCodec

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "JWT Auth API",
        "version": "1.0.0",
        "description": "Registration, login, token refresh and logout with JWT access tokens and rotating refresh tokens.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


@dataclass
class AuthComponents:
    settings: AuthSettings
    storage: DBStorage
    codec: TokenCodec
    directory: UserDirectory
    refresh_tokens: RefreshTokenStore
    flow: AuthenticationFlow
    request_authenticator: RequestAuthenticator


def auth_components() -> AuthComponents:
    """Components wired for the running app."""
    return current_app.extensions["auth"]


def configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)


def build_components(config, settings: AuthSettings, clock=None) -> AuthComponents:
    """
    Wire the auth components from configuration.
    Fails with SigningError before touching the database when signing is misconfigured.
    """
    clock = clock or SystemClock()
    codec = TokenCodec(
        StaticSecretProvider(settings.jwt_secret),
        clock=clock,
        algorithm=settings.jwt_algorithm,
        issuer=settings.jwt_issuer,
        default_ttl=settings.access_token_ttl,
        leeway=settings.jwt_leeway_seconds,
    )
    codec.ensure_ready()

    storage = DBStorage(
        config["DATABASE_URL"],
        timeout=config.get("STORAGE_TIMEOUT_SECONDS", 5),
        echo=config.get("DATABASE_ECHO", False),
    )
    storage.reload()

    hasher = Argon2PasswordHasher(
        time_cost=config.get("PASSWORD_HASH_TIME_COST"),
        memory_cost=config.get("PASSWORD_HASH_MEMORY_COST"),
        parallelism=config.get("PASSWORD_HASH_PARALLELISM"),
    )
    directory = UserDirectory(storage)
    refresh_tokens = RefreshTokenStore(storage, settings.refresh_token_ttl, clock=clock)
    flow = AuthenticationFlow(
        storage=storage,
        directory=directory,
        hasher=hasher,
        codec=codec,
        refresh_tokens=refresh_tokens,
        credentials=CredentialsAuthenticator(directory, hasher),
    )
    request_authenticator = RequestAuthenticator(
        codec,
        directory,
        cookie_name=settings.access_token_cookie_name,
        excluded_prefixes=settings.excluded_prefixes,
    )
    return AuthComponents(
        settings=settings,
        storage=storage,
        codec=codec,
        directory=directory,
        refresh_tokens=refresh_tokens,
        flow=flow,
        request_authenticator=request_authenticator,
    )


def create_app(config_name: str | None = None, clock=None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `clock` replaces the wall clock for every time-dependent component (tests).
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    configure_logging(app)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    if app.config.get("SWAGGER_ENABLED"):
        Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    settings = AuthSettings.from_config(app.config)
    components = build_components(app.config, settings, clock=clock)
    app.extensions["auth"] = components
    components.request_authenticator.init_app(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1")
    app.register_blueprint(users_bp, url_prefix="/api/v1")

    # Release the thread's DB session at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        components.storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to JWT Auth API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
