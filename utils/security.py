"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT (TokenCodec)
- JTI and refresh token string generation
"""
from __future__ import annotations

import logging
import math
import secrets
import uuid
from datetime import timedelta
from typing import Any, Dict, Tuple

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from utils.clock import SystemClock
from utils.exceptions import ExpiredTokenError, InvalidTokenError, SigningError

logger = logging.getLogger(__name__)

# 32 random bytes -> 256 bits of entropy, url-safe so it can live in a cookie
REFRESH_TOKEN_BYTES = 32
REQUIRED_CLAIMS = ["sub", "exp", "iat"]


class Argon2PasswordHasher:
    """Hash and verify passwords with Argon2id."""

    def __init__(self, time_cost: int | None = None, memory_cost: int | None = None,
                 parallelism: int | None = None):
        params = {
            "time_cost": time_cost,
            "memory_cost": memory_cost,
            "parallelism": parallelism,
        }
        self._ph = PasswordHasher(**{k: v for k, v in params.items() if v is not None})

    def hash(self, raw: str) -> str:
        return self._ph.hash(raw)

    def verify(self, raw: str, password_hash: str) -> bool:
        try:
            return self._ph.verify(password_hash, raw)
        except (VerificationError, InvalidHashError):
            return False


class StaticSecretProvider:
    """Serves the single process-wide signing secret."""

    def __init__(self, secret: str | bytes | None):
        self._secret = secret

    def current_signing_key(self) -> bytes:
        if not self._secret:
            raise SigningError("JWT secret is not configured")
        if isinstance(self._secret, str):
            return self._secret.encode("utf-8")
        return bytes(self._secret)


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def generate_refresh_token_value() -> str:
    """Opaque, unguessable refresh token string."""
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


def _ttl_seconds(ttl: timedelta | int | float) -> int:
    if isinstance(ttl, timedelta):
        return int(ttl.total_seconds())
    return int(ttl)


class TokenCodec:
    """
    Mints and validates HS256 access tokens.

    Validation only depends on the token, the signing secret and the clock;
    nothing is looked up in storage. Expiry is checked here rather than by
    PyJWT so the injected clock is the only source of "now".
    """

    def __init__(self, secret_provider, clock=None, algorithm: str = "HS256",
                 issuer: str | None = None, default_ttl: timedelta | int = timedelta(minutes=15),
                 leeway: int = 0):
        self.secret_provider = secret_provider
        self.clock = clock or SystemClock()
        self.algorithm = algorithm
        self.issuer = issuer
        self.default_ttl = default_ttl
        self.leeway = int(leeway)

    def ensure_ready(self) -> None:
        """Fail fast on a missing secret or a bad TTL; called once at startup."""
        if _ttl_seconds(self.default_ttl) <= 0:
            raise SigningError("Access token TTL must be positive")
        self.validate(self.mint("startup-probe"))

    def mint(self, subject: str, claims: Dict[str, Any] | None = None,
             ttl: timedelta | int | None = None) -> str:
        seconds = _ttl_seconds(self.default_ttl if ttl is None else ttl)
        if seconds <= 0:
            raise SigningError("Token TTL must be positive")
        key = self.secret_provider.current_signing_key()

        now = self.clock.now().timestamp()
        issued_at = int(now)
        payload = dict(claims or {})
        payload.update(
            {
                "sub": str(subject),
                "iat": issued_at,
                # rounded up so the token lives at least the full ttl
                "exp": math.ceil(now + seconds),
                "jti": generate_jti(),
            }
        )
        if self.issuer:
            payload["iss"] = self.issuer
        try:
            return jwt.encode(payload, key, algorithm=self.algorithm)
        except (jwt.InvalidKeyError, NotImplementedError) as exc:
            raise SigningError(f"Cannot sign token: {exc}") from exc

    def _decode(self, token: str) -> Dict[str, Any]:
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token is empty")
        key = self.secret_provider.current_signing_key()
        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(f"Invalid token: {exc}") from exc

        if not claims.get("sub"):
            raise InvalidTokenError("Token has no subject")
        if not isinstance(claims.get("exp"), (int, float)):
            raise InvalidTokenError("Token expiry is not a timestamp")
        return claims

    def validate(self, token: str) -> Tuple[str, Dict[str, Any]]:
        """
        Verify signature and expiry.
        Returns (subject, claims); raises InvalidTokenError or ExpiredTokenError.
        """
        claims = self._decode(token)
        if self.clock.now().timestamp() >= claims["exp"] + self.leeway:
            raise ExpiredTokenError()
        return claims["sub"], claims

    def extract_subject(self, token: str) -> str:
        """Read the subject of a correctly signed token, expired or not."""
        return self._decode(token)["sub"]
