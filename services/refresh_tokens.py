"""
Refresh token persistence.

Tokens are opaque random strings stored in refresh_tokens. They are never
deleted by the service: logout and rotation only flip `revoked`.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from models.refresh_token import RefreshToken
from utils.clock import SystemClock, as_utc
from utils.exceptions import NotFoundError, SigningError
from utils.security import generate_refresh_token_value

logger = logging.getLogger(__name__)


def _by_token(session, token):
    # bulk updates bypass the identity map, so always reload the row
    return session.query(RefreshToken).populate_existing().filter(RefreshToken.token == token)


class RefreshTokenStore:
    def __init__(self, storage, ttl: timedelta, clock=None):
        if ttl.total_seconds() <= 0:
            raise SigningError("Refresh token TTL must be positive")
        self.storage = storage
        self.ttl = ttl
        self.clock = clock or SystemClock()

    def create(self, user_id) -> RefreshToken:
        def _create(session):
            # built per attempt so a retry never re-adds a rolled back instance
            record = RefreshToken(
                token=generate_refresh_token_value(),
                user_id=user_id,
                revoked=False,
                expiry_date=self.clock.now() + self.ttl,
            )
            session.add(record)
            session.flush()
            return record

        record = self.storage.run(_create)
        logger.debug("Issued refresh token id=%s for user %s", record.id, user_id)
        return record

    def find_by_token(self, token: str) -> RefreshToken:
        record = None
        if token:
            record = self.storage.run(lambda session: _by_token(session, token).first())
        if record is None:
            raise NotFoundError("Refresh token not found")
        return record

    def revoke(self, token: str) -> bool:
        """
        Mark a token revoked. Unknown and already revoked tokens are not errors;
        returns True only when this call flipped the flag.
        """
        if not token:
            return False

        def _revoke(session):
            return session.query(RefreshToken).filter(
                RefreshToken.token == token,
                RefreshToken.revoked.is_(False),
            ).update({RefreshToken.revoked: True}, synchronize_session=False)

        revoked = self.storage.run(_revoke) == 1
        if revoked:
            logger.info("Refresh token revoked")
        return revoked

    def claim(self, token: str) -> RefreshToken | None:
        """
        Atomically revoke a usable token and return it.
        Of any number of concurrent callers presenting the same token,
        only one gets the record back; the rest get None.
        """
        if not token:
            return None
        now = self.clock.now()

        def _claim(session):
            changed = session.query(RefreshToken).filter(
                RefreshToken.token == token,
                RefreshToken.revoked.is_(False),
                RefreshToken.expiry_date > now,
            ).update({RefreshToken.revoked: True}, synchronize_session=False)
            if changed != 1:
                return None
            return _by_token(session, token).one()

        return self.storage.run(_claim)

    def is_usable(self, refresh_token: RefreshToken) -> bool:
        if refresh_token is None or refresh_token.revoked:
            return False
        return self.clock.now() < as_utc(refresh_token.expiry_date)

    def describe_unusable(self, token: str) -> str:
        """Why a token could not be used; for logs only."""
        try:
            record = self.find_by_token(token)
        except NotFoundError:
            return "unknown"
        if record.revoked:
            return "revoked"
        if not self.is_usable(record):
            return "expired"
        return "in use"
