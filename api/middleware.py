"""
Request authentication.

RequestAuthenticator runs before every request. It looks for an access
token (cookie first, then `Authorization: Bearer`), validates it and, on
success, records the principal in the request's AuthContext
(`flask.g.auth_context`). It never rejects a request: a missing, malformed
or expired token just leaves the context anonymous and the route
decorators in utils.decorators decide what to do.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Tuple

from flask import g, request

from utils.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


@dataclass
class AuthContext:
    """Who is making the current request. Lives for one request only."""

    principal: object = None
    authorities: Tuple[str, ...] = field(default_factory=tuple)
    token_claims: dict = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    def authenticate(self, principal, authorities: Iterable[str], claims: dict | None = None) -> None:
        self.principal = principal
        self.authorities = tuple(authorities)
        self.token_claims = dict(claims or {})


def get_auth_context() -> AuthContext:
    context = g.get("auth_context")
    if context is None:
        context = AuthContext()
        g.auth_context = context
    return context


class RequestAuthenticator:
    def __init__(self, codec, directory, cookie_name: str, excluded_prefixes: Iterable[str] = ()):
        self.codec = codec
        self.directory = directory
        self.cookie_name = cookie_name
        self.excluded_prefixes = tuple(excluded_prefixes)

    def init_app(self, app) -> None:
        app.before_request(self._before_request)

    def _before_request(self):
        g.auth_context = self.authenticate(
            request.path, request.cookies, request.headers, get_auth_context()
        )

    def extract_token(self, cookies: Mapping[str, str], headers: Mapping[str, str]) -> str | None:
        token = cookies.get(self.cookie_name) if self.cookie_name else None
        if token:
            return token
        scheme, _, value = (headers.get("Authorization") or "").partition(" ")
        if scheme.lower() == BEARER_SCHEME and value.strip():
            return value.strip()
        return None

    def is_excluded(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.excluded_prefixes)

    def authenticate(self, path: str, cookies: Mapping[str, str], headers: Mapping[str, str],
                     context: AuthContext) -> AuthContext:
        token = self.extract_token(cookies, headers)
        if token is None or self.is_excluded(path):
            return context

        try:
            subject = self.codec.extract_subject(token)
        except InvalidTokenError as exc:
            logger.debug("Ignoring unreadable token on %s: %s", path, exc)
            return context

        if not subject or context.is_authenticated:
            return context

        principal = self.directory.find_by_email(subject)
        if principal is None:
            logger.debug("Token subject has no matching user")
            return context

        try:
            token_subject, claims = self.codec.validate(token)
        except InvalidTokenError as exc:
            # ExpiredTokenError included
            logger.debug("Rejected token on %s: %s", path, exc)
            return context

        if token_subject != principal.email:
            return context

        context.authenticate(principal, principal.authorities, claims)
        return context
