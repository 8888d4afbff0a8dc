from __future__ import annotations

from functools import wraps

from flask import abort, g

from api.middleware import get_auth_context


def jwt_required():
    """Reject the request with 401 unless RequestAuthenticator found a valid token."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            context = get_auth_context()
            if not context.is_authenticated:
                abort(401, description="Authentication required")
            g.current_user = context.principal
            g.current_user_roles = list(context.authorities)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: list[str]):
    """
    Allow access if the user has ANY of the required authorities.
    Deny (403) only if there is NO overlap between user authorities and required_roles.
    """
    req = set(required_roles or [])

    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            user_roles = set(getattr(g, "current_user_roles", []))
            if not (user_roles & req):
                abort(403, description="Insufficient role")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
