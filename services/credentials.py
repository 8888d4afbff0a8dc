from __future__ import annotations

import secrets

from utils.exceptions import InvalidCredentialsError


class CredentialsAuthenticator:
    """
    Checks an email/password pair against the user directory.

    Unknown email and wrong password raise the same InvalidCredentialsError.
    For unknown emails a throwaway hash is still verified so both failures
    cost one Argon2 verification.
    """

    def __init__(self, directory, hasher):
        self.directory = directory
        self.hasher = hasher
        self._dummy_hash = None

    def _placeholder_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash(secrets.token_urlsafe(16))
        return self._dummy_hash

    def authenticate(self, email: str, raw_password: str):
        if not email or not raw_password:
            raise InvalidCredentialsError()

        user = self.directory.find_by_email(email)
        if user is None:
            self.hasher.verify(raw_password, self._placeholder_hash())
            raise InvalidCredentialsError()
        if not self.hasher.verify(raw_password, user.password_hash):
            raise InvalidCredentialsError()
        return user
