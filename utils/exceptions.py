"""
Error taxonomy for the auth layer.

Every error carries the HTTP status and error code the API answers with,
so api/errors.py can render them without a lookup table.
"""
from __future__ import annotations


class AuthError(Exception):
    status = 400
    code = "BAD_REQUEST"
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentialsError(AuthError):
    status = 401
    code = "INVALID_CREDENTIALS"
    # one message for unknown email and wrong password
    default_message = "Invalid email or password"


class DuplicateEmailError(AuthError):
    status = 409
    code = "CONFLICT"
    default_message = "Email already registered"


class InvalidTokenError(AuthError):
    status = 401
    code = "INVALID_TOKEN"
    default_message = "Invalid token"


class ExpiredTokenError(InvalidTokenError):
    code = "TOKEN_EXPIRED"
    default_message = "Token expired"


class InvalidRefreshTokenError(AuthError):
    status = 401
    code = "INVALID_REFRESH_TOKEN"
    default_message = "Invalid, revoked or expired refresh token"


class NotFoundError(AuthError):
    status = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class StorageError(AuthError):
    """Transient storage failure; safe to retry."""
    status = 503
    code = "STORAGE_UNAVAILABLE"
    default_message = "Storage temporarily unavailable"


class SigningError(AuthError):
    """Broken signing configuration. Raised at startup, never retried."""
    status = 500
    code = "SIGNING_ERROR"
    default_message = "Token signing is misconfigured"
