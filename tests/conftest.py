from datetime import datetime, timedelta, timezone

import pytest

from api import create_app
from models.user import User
from models.role import Role

PASSWORD = "correct-horse-battery"


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start=None):
        self.current = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def now(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def app(clock):
    app = create_app("testing", clock=clock)
    yield app
    storage = app.extensions["auth"].storage
    storage.drop_all()
    storage.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def components(app):
    return app.extensions["auth"]


@pytest.fixture
def flow(components):
    return components.flow


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def user(components):
    hasher = components.flow.hasher
    return components.directory.save(
        User(
            firstname="Ada",
            lastname="Lovelace",
            email="ada@example.com",
            password_hash=hasher.hash(PASSWORD),
            role=Role.USER,
        )
    )
