"""
Authentication blueprint (mounted at /api/v1/auth):
- POST /register
- POST /login
- POST /refresh-token
- POST /logout

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens (JWTs signed with HS256) and opaque refresh tokens
- Stores refresh tokens in DB (RefreshToken model) so we can revoke / rotate them
- Returns both tokens in the body and as HttpOnly cookies
"""
from __future__ import annotations

from flask import Blueprint, jsonify, make_response, request

from api import auth_components
from models.schemas.user import (
    AuthenticationResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
)

bp = Blueprint("auth", __name__)

# the access cookie has to reach every API route, the refresh cookie only this blueprint
ACCESS_COOKIE_PATH = "/api"
REFRESH_COOKIE_PATH = "/api/v1/auth"

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
auth_response_schema = AuthenticationResponseSchema()


def _token_response(result, status: int):
    settings = auth_components().settings
    response = jsonify(auth_response_schema.dump(result))
    response.status_code = status
    response.set_cookie(
        settings.access_token_cookie_name,
        result.access_token,
        max_age=int(settings.access_token_ttl.total_seconds()),
        path=ACCESS_COOKIE_PATH,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
    response.set_cookie(
        settings.refresh_token_cookie_name,
        result.refresh_token,
        max_age=int(settings.refresh_token_ttl.total_seconds()),
        path=REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
    return response


def _presented_refresh_token() -> str | None:
    """Body field `refreshToken` wins over the refresh cookie."""
    payload = refresh_token_schema.load(request.get_json(silent=True) or {})
    token = payload.get("refresh_token")
    if token:
        return token
    return request.cookies.get(auth_components().settings.refresh_token_cookie_name)


@bp.post("/register")
def register():
    """
    Register a new user and sign them in.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            firstname: { type: string }
            lastname: { type: string }
            email: { type: string }
            password: { type: string }
            role: { type: string, enum: [USER, MANAGER, ADMIN] }
    responses:
      201:
        description: Created (returns tokens)
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    data = register_schema.load(request.get_json(silent=True) or {})
    result = auth_components().flow.register(
        data.get("firstname"),
        data.get("lastname"),
        data["email"],
        data["password"],
        data["role"],
    )
    return _token_response(result, 201)


@bp.post("/login")
def login():
    """
    Login: return access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    result = auth_components().flow.login(data["email"], data["password"])
    return _token_response(result, 200)


@bp.post("/refresh-token")
def refresh():
    """
    Exchange a refresh token for a new access token and a new refresh token (rotation).
    The refresh token is read from the body or from the refresh cookie.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Unknown, revoked or expired refresh token
    """
    result = auth_components().flow.refresh(_presented_refresh_token())
    return _token_response(result, 200)


@bp.post("/logout")
def logout():
    """
    Logout: revokes the refresh token and clears the auth cookies.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      204:
        description: Logged out
    """
    components = auth_components()
    components.flow.logout(_presented_refresh_token())

    settings = components.settings
    response = make_response("", 204)
    response.delete_cookie(
        settings.access_token_cookie_name, path=ACCESS_COOKIE_PATH,
        secure=settings.cookie_secure, httponly=True, samesite=settings.cookie_samesite,
    )
    response.delete_cookie(
        settings.refresh_token_cookie_name, path=REFRESH_COOKIE_PATH,
        secure=settings.cookie_secure, httponly=True, samesite=settings.cookie_samesite,
    )
    return response
