import re

from pydantic import BaseModel, EmailStr, field_validator

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{3,30}$")
PASSWORD_SPECIALS = set("!@#$%^&*()_+-=[]{}|;:,.<>?")


def validate_username(value: str) -> str:
    value = (value or "").strip()
    if not USERNAME_PATTERN.match(value):
        raise ValueError("Username must be 3-30 characters of letters, digits, '_' or '-'")
    return value


def validate_display_name(value: str) -> str:
    value = (value or "").strip()
    if len(value) < 2 or len(value) > 50:
        raise ValueError("Display name must be 2-50 characters")
    return value


def _validate_password_length(value: str) -> str:
    if len(value.encode("utf-8")) > 72:
        raise ValueError("Password too long (max 72 bytes)")
    return value


def validate_password_strength(value: str) -> str:
    _validate_password_length(value)
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not any(ch.isdigit() for ch in value):
        raise ValueError("Password must contain at least one number")
    if not any(ch in PASSWORD_SPECIALS for ch in value):
        raise ValueError("Password must contain at least one special character")
    if not any(ch.isupper() for ch in value):
        raise ValueError("Password must contain at least one uppercase letter")
    if not any(ch.islower() for ch in value):
        raise ValueError("Password must contain at least one lowercase letter")
    return value


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class RegisterRequest(BaseModel):
    username: str
    display_name: str
    email: EmailStr
    password: str

    check_username = field_validator("username")(validate_username)
    check_display_name = field_validator("display_name")(validate_display_name)
    check_password = field_validator("password")(validate_password_strength)


class LoginRequest(BaseModel):
    username: str
    password: str

    check_password_length = field_validator("password")(_validate_password_length)


class RefreshRequest(BaseModel):
    refresh_token: str


class Message(BaseModel):
    message: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

    check_current_password = field_validator("current_password")(_validate_password_length)
    check_new_password = field_validator("new_password")(validate_password_strength)
