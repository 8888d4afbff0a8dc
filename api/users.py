from __future__ import annotations

from typing import Tuple

from flask import Blueprint, abort, g, jsonify, request

from api import auth_components
from models.schemas.user import UserOutSchema
from utils.decorators import jwt_required, roles_required

MAX_LIMIT = 100

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify({"data": user_out_schema.dump(g.current_user)}), 200


@bp.get("/hello")
@roles_required(["ROLE_ADMIN", "ROLE_USER"])
def hello():
    """
    Secured greeting for users and admins.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      403:
        description: Insufficient role
    """
    return jsonify({"message": f"Hello {g.current_user.email}"}), 200


@bp.get("/users")
@roles_required(["ROLE_ADMIN"])
def list_users():
    """
    List all users (admin only)
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
      - in: query
        name: limit
        type: integer
    responses:
      200: { description: OK }
      403: { description: Insufficient role }
    """
    page, limit = parse_pagination()
    rows, total = auth_components().directory.list(page=page, limit=limit)
    return jsonify(
        {
            "data": user_list_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total}
        }
    )
