from typing import Generic, TypeVar
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator, model_validator
from pydantic.alias_generators import to_camel
import phonenumbers
import re

T = TypeVar("T")


class CamelModel(BaseModel):
    """Serialises to camelCase; accepts both camelCase and snake_case input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def validate_password_strength(value: str) -> str:
    """
    Password must be at least 8 characters and contain:
    - At least one letter
    - At least one digit
    """
    if len(value) < 8:
        raise ValueError('Password must be at least 8 characters')

    if not re.search(r'[A-Za-z]', value):
        raise ValueError('Password must contain at least one letter')

    if not re.search(r'\d', value):
        raise ValueError('Password must contain at least one digit')

    return value


def require_non_blank(value: str, field: str) -> str:
    if not value or not value.strip():
        raise ValueError(f'{field} is required')
    return value


# Responses

class AuthUser(CamelModel):
    """Public projection of a user. Never carries the password hash."""
    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    roles: list[str] = []


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"
    user: AuthUser


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T | None = None


# Requests

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str
    first_name: str
    last_name: str
    phone: str | None = None

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        return validate_password_strength(value)

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, value, info):
        return require_non_blank(value, info.field_name).strip()

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value):
        """
        Validates phone number format using Google's phonenumbers library.
        Accepts international format: +16502530000
        """
        if value is None or not value.strip():
            return None
        try:
            parsed = phonenumbers.parse(value, None)
            if not phonenumbers.is_valid_number(parsed):
                raise ValueError('Invalid phone number')

            return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)

        except phonenumbers.NumberParseException:
            raise ValueError('Phone number must include country code (e.g.: +16502530000)')


class LoginRequest(CamelModel):
    email: EmailStr
    password: str

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        return require_non_blank(value, 'password')


class RefreshTokenRequest(CamelModel):
    refresh_token: str

    @field_validator('refresh_token')
    @classmethod
    def validate_token(cls, value):
        return require_non_blank(value, 'refresh token')


class UpdatePasswordRequest(CamelModel):
    old_password: str
    new_password: str
    confirm_password: str

    @field_validator('old_password')
    @classmethod
    def validate_old_password(cls, value):
        return require_non_blank(value, 'old password')

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, value):
        return validate_password_strength(value)

    @model_validator(mode='after')
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError('Passwords do not match')
        return self


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str
    new_password: str
    confirm_password: str

    @field_validator('token')
    @classmethod
    def validate_token(cls, value):
        return require_non_blank(value, 'reset token')

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, value):
        return validate_password_strength(value)

    @model_validator(mode='after')
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError('Passwords do not match')
        return self
