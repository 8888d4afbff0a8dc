from marshmallow import EXCLUDE, Schema, fields, pre_load, validate, validates

from models.role import Role
from models.schemas.common import normalize_email, validate_password_length


class _EmailNormalizingSchema(Schema):
    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = normalize_email(data["email"])
        return data


class RegisterSchema(_EmailNormalizingSchema):
    firstname = fields.String(allow_none=True, load_default=None)
    lastname = fields.String(allow_none=True, load_default=None)
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    role = fields.String(
        load_default=Role.USER.name,
        validate=validate.OneOf([r.name for r in Role]),
    )

    @pre_load
    def normalize_role(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("role"), str):
            data = dict(data)
            data["role"] = data["role"].strip().upper()
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        validate_password_length(value)


class LoginSchema(_EmailNormalizingSchema):
    email = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class RefreshTokenSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(data_key="refreshToken", load_default=None)


class UserOutSchema(Schema):
    id = fields.Integer()
    firstname = fields.String(allow_none=True)
    lastname = fields.String(allow_none=True)
    email = fields.String()
    role = fields.Method("get_role")
    roles = fields.List(fields.String(), attribute="authorities")

    def get_role(self, obj):
        return Role.parse(obj.role).name


class AuthenticationResponseSchema(Schema):
    access_token = fields.String(data_key="accessToken")
    refresh_token = fields.String(data_key="refreshToken")
    id = fields.Integer()
    email = fields.String()
    roles = fields.List(fields.String())
    token_type = fields.String(data_key="tokenType")
