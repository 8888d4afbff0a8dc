from marshmallow import ValidationError

MIN_PASSWORD_LENGTH = 8


def normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


def validate_password_length(value: str) -> None:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
