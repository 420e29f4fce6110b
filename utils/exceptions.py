"""
Typed application errors.

Every error carries an HTTP status and a stable machine-readable ``code``.
Services raise them and the handlers registered in ``main.py`` turn them into
the ``{"success": false, "message", "code", "details"}`` envelope.

Usage:
    from utils.exceptions import UserNotFoundError
    raise UserNotFoundError()
"""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for all errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "ERROR"
    message: str = "Something went wrong"

    def __init__(self, message: str | None = None, details: Any = None, headers: dict[str, str] | None = None):
        self.message = message or self.message
        self.details = details
        super().__init__(status_code=self.status_code, detail=self.message, headers=headers)


# 400

class ValidationAppError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    message = "Validation failed"


class EmailAlreadyExistsError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "EMAIL_ALREADY_EXISTS"
    message = "Email already registered"


class InvalidResetTokenError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_RESET_TOKEN"
    message = "Invalid or expired password reset token"


# 401

class AuthenticationError(AppError):
    """401 errors; clients are told to present a bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    message = "Authentication required"

    def __init__(self, message: str | None = None, details: Any = None):
        super().__init__(message, details, headers={"WWW-Authenticate": "Bearer"})


class UnauthorizedError(AuthenticationError):
    pass


class NoTokenError(AuthenticationError):
    code = "NO_TOKEN"
    message = "No authentication token provided"


class InvalidTokenError(AuthenticationError):
    code = "INVALID_TOKEN"
    message = "Invalid token"


class TokenExpiredError(InvalidTokenError):
    code = "TOKEN_EXPIRED"
    message = "Token has expired"


class TokenMalformedError(InvalidTokenError):
    code = "TOKEN_MALFORMED"
    message = "Malformed token"


class InvalidTokenKindError(InvalidTokenError):
    code = "INVALID_TOKEN_KIND"
    message = "Invalid token type"


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    message = "Invalid email or password"


class InvalidPasswordError(AuthenticationError):
    code = "INVALID_PASSWORD"
    message = "Current password is incorrect"


class InvalidRefreshTokenError(AuthenticationError):
    code = "INVALID_REFRESH_TOKEN"
    message = "Invalid refresh token"


# 403

class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    message = "Insufficient permissions"


class AccountInactiveError(ForbiddenError):
    code = "ACCOUNT_INACTIVE"
    message = "User account is inactive"


# 404

class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Resource not found"


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"
    message = "User not found"
