from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from models.schemas.common import normalize_email
from models.user import User
from utils.exceptions import DuplicateEmailError


def _is_duplicate_email(exc: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed: users.email"
    # postgres: duplicate key value violates unique constraint "ix_users_email"
    message = str(getattr(exc, "orig", exc)).lower()
    return ("unique" in message or "duplicate" in message) and "email" in message


class UserDirectory:
    """User lookup and persistence on top of DBStorage."""

    def __init__(self, storage):
        self.storage = storage

    def find_by_email(self, email: str) -> User | None:
        email = normalize_email(email)
        if not email:
            return None
        return self.storage.run(
            lambda session: session.query(User).filter(User.email == email).first()
        )

    def get(self, user_id) -> User | None:
        return self.storage.run(lambda session: session.get(User, user_id))

    def save(self, user: User) -> User:
        user.email = normalize_email(user.email)

        def _save(session):
            session.add(user)
            try:
                session.flush()
            except IntegrityError as exc:
                if _is_duplicate_email(exc):
                    raise DuplicateEmailError() from exc
                raise
            return user

        return self.storage.run(_save)

    def list(self, page: int = 1, limit: int = 20):
        def _list(session):
            query = session.query(User)
            total = query.count()
            rows = query.order_by(User.id.asc()).offset((page - 1) * limit).limit(limit).all()
            return rows, total

        return self.storage.run(_list)
