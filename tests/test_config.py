from datetime import timedelta

import pytest

from api import create_app
from api.config import (
    AuthSettings,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
)
from utils.exceptions import SigningError


@pytest.mark.parametrize(
    "name,expected",
    [
        ("prod", ProductionConfig),
        ("production", ProductionConfig),
        ("testing", TestingConfig),
        ("dev", DevelopmentConfig),
        ("anything-else", DevelopmentConfig),
    ],
)
def test_get_config(name, expected):
    assert get_config(name) is expected


def _config(**overrides):
    config = {
        key: getattr(TestingConfig, key)
        for key in dir(TestingConfig)
        if key.isupper()
    }
    config.update(overrides)
    return config


def test_auth_settings_from_config():
    settings = AuthSettings.from_config(
        _config(AUTH_EXCLUDED_PREFIXES=["/api/v1/auth/", " ", "/public/"])
    )
    assert settings.access_token_ttl == TestingConfig.ACCESS_TOKEN_EXPIRES
    assert settings.refresh_token_ttl == TestingConfig.REFRESH_TOKEN_EXPIRES
    assert settings.excluded_prefixes == ("/api/v1/auth/", "/public/")
    assert settings.access_token_cookie_name == "access_token"


@pytest.mark.parametrize("key", ["ACCESS_TOKEN_EXPIRES", "REFRESH_TOKEN_EXPIRES"])
def test_non_positive_ttl_aborts_startup(key):
    with pytest.raises(SigningError):
        AuthSettings.from_config(_config(**{key: timedelta(seconds=0)}))


def test_missing_secret_aborts_startup(monkeypatch):
    monkeypatch.setattr(ProductionConfig, "JWT_SECRET", None)
    monkeypatch.setattr(ProductionConfig, "SWAGGER_ENABLED", False)
    with pytest.raises(SigningError):
        create_app("production")


def test_testing_app_uses_configured_cookie_names(app, components):
    assert components.settings.access_token_cookie_name == app.config["ACCESS_TOKEN_COOKIE_NAME"]
    assert components.settings.refresh_token_cookie_name == app.config["REFRESH_TOKEN_COOKIE_NAME"]
    assert components.request_authenticator.cookie_name == app.config["ACCESS_TOKEN_COOKIE_NAME"]


def test_dev_runner_uses_app_env(monkeypatch):
    from flask import Flask

    from api.__main__ import main

    calls = {}
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("FLASK_RUN_PORT", "9123")
    monkeypatch.setattr(Flask, "run", lambda self, **kwargs: calls.update(kwargs))

    app = main()

    assert app.config["TESTING"] is True
    assert calls == {"host": "127.0.0.1", "port": 9123, "debug": False}
    app.extensions["auth"].storage.dispose()
