"""
Registration, login, refresh and logout.

Each successful register/login/refresh mints one access token and creates
one refresh token inside a single transaction. Refresh rotates: the
presented refresh token is revoked and replaced by a new one with a fresh
expiry, so a refresh token can be exchanged at most once.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from models.role import Role
from models.schemas.common import normalize_email
from models.user import User
from utils.exceptions import DuplicateEmailError, InvalidCredentialsError, InvalidRefreshTokenError

logger = logging.getLogger(__name__)

TOKEN_TYPE = "BEARER"


@dataclass(frozen=True)
class AuthenticationResponse:
    access_token: str
    refresh_token: str
    id: int
    email: str
    roles: List[str] = field(default_factory=list)
    token_type: str = TOKEN_TYPE


class AuthenticationFlow:
    def __init__(self, storage, directory, hasher, codec, refresh_tokens, credentials):
        self.storage = storage
        self.directory = directory
        self.hasher = hasher
        self.codec = codec
        self.refresh_tokens = refresh_tokens
        self.credentials = credentials

    def _issue(self, user: User) -> AuthenticationResponse:
        refresh = self.refresh_tokens.create(user.id)
        roles = list(user.authorities)
        access = self.codec.mint(user.email, claims={"roles": roles})
        return AuthenticationResponse(
            access_token=access,
            refresh_token=refresh.token,
            id=user.id,
            email=user.email,
            roles=roles,
        )

    def register(self, firstname, lastname, email, raw_password, role=Role.USER) -> AuthenticationResponse:
        email = normalize_email(email)
        role = Role.parse(role)
        password_hash = self.hasher.hash(raw_password)

        def _register(session):
            if self.directory.find_by_email(email) is not None:
                raise DuplicateEmailError()
            user = self.directory.save(
                User(
                    firstname=firstname,
                    lastname=lastname,
                    email=email,
                    password_hash=password_hash,
                    role=role,
                )
            )
            return self._issue(user)

        response = self.storage.run(_register)
        logger.info("Registered user id=%s role=%s", response.id, role.name)
        return response

    def login(self, email, raw_password) -> AuthenticationResponse:
        try:
            user = self.credentials.authenticate(email, raw_password)
        except InvalidCredentialsError:
            logger.warning("Failed login attempt")
            raise

        response = self.storage.run(lambda session: self._issue(user))
        logger.info("User id=%s logged in", user.id)
        return response

    def refresh(self, refresh_token: str) -> AuthenticationResponse:
        def _refresh(session):
            record = self.refresh_tokens.claim(refresh_token)
            if record is None:
                reason = self.refresh_tokens.describe_unusable(refresh_token) if refresh_token else "missing"
                logger.warning("Refresh refused: %s token", reason)
                raise InvalidRefreshTokenError()
            return self._issue(record.user)

        # a transient storage error rolls back the claim too, so the retry starts clean
        response = self.storage.run(_refresh)
        logger.info("Rotated refresh token for user id=%s", response.id)
        return response

    def logout(self, refresh_token: str) -> None:
        if self.refresh_tokens.revoke(refresh_token):
            logger.info("Logged out")
