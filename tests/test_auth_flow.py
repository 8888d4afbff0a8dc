import pytest
from sqlalchemy.exc import IntegrityError

from models.refresh_token import RefreshToken
from models.role import Role
from models.user import User
from utils.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    SigningError,
)


def _refresh_count(components):
    return components.storage.count(RefreshToken)


def test_register_returns_bearer_token_pair(flow, components):
    response = flow.register("Alan", "Turing", "a@x.com", "pw", "USER")

    assert response.access_token
    assert response.refresh_token
    assert response.roles == ["ROLE_USER"]
    assert response.token_type == "BEARER"
    assert response.email == "a@x.com"
    assert isinstance(response.id, int)

    subject, claims = components.codec.validate(response.access_token)
    assert subject == "a@x.com"
    assert claims["roles"] == ["ROLE_USER"]
    assert _refresh_count(components) == 1


def test_register_hashes_password(flow, components):
    flow.register("Alan", "Turing", "a@x.com", "plain-password", Role.USER)
    stored = components.directory.find_by_email("a@x.com")
    assert stored.password_hash != "plain-password"
    assert stored.password_hash.startswith("$argon2")


def test_register_admin_gets_permission_authorities(flow):
    response = flow.register(None, None, "boss@x.com", "pw", Role.ADMIN)
    assert response.roles[-1] == "ROLE_ADMIN"
    assert "admin:read" in response.roles
    assert "management:delete" in response.roles


def test_register_manager_authorities(flow):
    response = flow.register(None, None, "mgr@x.com", "pw", "manager")
    assert response.roles == [
        "management:create",
        "management:delete",
        "management:read",
        "management:update",
        "ROLE_MANAGER",
    ]


def test_register_duplicate_email(flow, components):
    flow.register("A", "B", "a@x.com", "pw", "USER")
    with pytest.raises(DuplicateEmailError):
        flow.register("C", "D", "A@X.com ", "other", "USER")
    assert components.storage.count(User) == 1
    assert _refresh_count(components) == 1


def test_directory_save_maps_only_email_collisions_to_duplicate(components, user):
    with pytest.raises(DuplicateEmailError):
        components.directory.save(User(email=" ADA@example.com", password_hash="x", role=Role.USER))

    with pytest.raises(IntegrityError):
        components.directory.save(User(email="nohash@x.com", password_hash=None, role=Role.USER))
    assert components.storage.count(User) == 1


def test_register_rolls_back_when_signing_fails(flow, components, monkeypatch):
    def broken_mint(*args, **kwargs):
        raise SigningError("no key")

    monkeypatch.setattr(components.codec, "mint", broken_mint)
    with pytest.raises(SigningError):
        flow.register("A", "B", "a@x.com", "pw", "USER")

    assert components.directory.find_by_email("a@x.com") is None
    assert _refresh_count(components) == 0


def test_login_issues_new_pair(flow, user, password, components):
    response = flow.login("ada@example.com", password)
    assert response.id == user.id
    assert response.roles == ["ROLE_USER"]
    assert components.codec.validate(response.access_token)[0] == "ada@example.com"
    assert components.refresh_tokens.is_usable(components.refresh_tokens.find_by_token(response.refresh_token))


def test_each_login_adds_a_refresh_token(flow, user, password, components):
    first = flow.login("ada@example.com", password)
    second = flow.login("ADA@example.com", password)
    assert first.refresh_token != second.refresh_token
    assert _refresh_count(components) == 2


def test_login_wrong_password_and_unknown_email_fail_alike(flow, user):
    with pytest.raises(InvalidCredentialsError) as wrong_password:
        flow.login("ada@example.com", "wrong")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        flow.login("nobody@example.com", "wrong")
    assert str(wrong_password.value) == str(unknown_email.value)


@pytest.mark.parametrize("email,pw", [("", "x"), ("ada@example.com", ""), (None, None)])
def test_login_with_missing_fields(flow, user, email, pw):
    with pytest.raises(InvalidCredentialsError):
        flow.login(email, pw)


def test_refresh_rotates_tokens(flow, user, password, components):
    issued = flow.login("ada@example.com", password)

    refreshed = flow.refresh(issued.refresh_token)

    assert refreshed.refresh_token != issued.refresh_token
    assert refreshed.access_token != issued.access_token
    assert refreshed.email == "ada@example.com"
    assert components.codec.validate(refreshed.access_token)[0] == "ada@example.com"

    store = components.refresh_tokens
    assert store.find_by_token(issued.refresh_token).revoked is True
    assert store.is_usable(store.find_by_token(refreshed.refresh_token))
    assert _refresh_count(components) == 2


def test_refresh_token_cannot_be_used_twice(flow, user, password):
    issued = flow.login("ada@example.com", password)
    flow.refresh(issued.refresh_token)
    with pytest.raises(InvalidRefreshTokenError):
        flow.refresh(issued.refresh_token)


def test_refresh_with_revoked_token_fails_before_expiry(flow, user, password):
    issued = flow.login("ada@example.com", password)
    flow.logout(issued.refresh_token)
    with pytest.raises(InvalidRefreshTokenError):
        flow.refresh(issued.refresh_token)


def test_refresh_with_expired_token_fails(flow, user, password, clock, components):
    issued = flow.login("ada@example.com", password)
    clock.advance(seconds=components.settings.refresh_token_ttl.total_seconds())
    with pytest.raises(InvalidRefreshTokenError):
        flow.refresh(issued.refresh_token)


@pytest.mark.parametrize("token", ["unknown", "", None])
def test_refresh_with_unknown_token_fails(flow, token):
    with pytest.raises(InvalidRefreshTokenError):
        flow.refresh(token)


def test_rotation_gives_fresh_expiry_without_touching_the_old_one(flow, user, password, clock, components):
    store = components.refresh_tokens
    issued = flow.login("ada@example.com", password)
    original_expiry = store.find_by_token(issued.refresh_token).expiry_date

    clock.advance(hours=1)
    refreshed = flow.refresh(issued.refresh_token)

    assert store.find_by_token(issued.refresh_token).expiry_date == original_expiry
    new_record = store.find_by_token(refreshed.refresh_token)
    assert new_record.expiry_date > original_expiry


def test_failed_refresh_leaves_the_token_usable(flow, user, password, components, monkeypatch):
    issued = flow.login("ada@example.com", password)

    def broken_mint(*args, **kwargs):
        raise SigningError("no key")

    monkeypatch.setattr(components.codec, "mint", broken_mint)
    with pytest.raises(SigningError):
        flow.refresh(issued.refresh_token)
    monkeypatch.undo()

    store = components.refresh_tokens
    assert store.is_usable(store.find_by_token(issued.refresh_token))
    assert flow.refresh(issued.refresh_token).refresh_token


def test_logout_is_idempotent(flow, user, password, components):
    issued = flow.login("ada@example.com", password)
    flow.logout(issued.refresh_token)
    flow.logout(issued.refresh_token)
    flow.logout("never-issued")
    flow.logout(None)
    assert components.refresh_tokens.find_by_token(issued.refresh_token).revoked is True


def test_logout_only_revokes_the_given_session(flow, user, password, components):
    laptop = flow.login("ada@example.com", password)
    phone = flow.login("ada@example.com", password)
    flow.logout(laptop.refresh_token)
    assert flow.refresh(phone.refresh_token).refresh_token
