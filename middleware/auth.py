"""
Bearer-token authentication dependencies.

``authenticate`` verifies the access token and attaches an ``AuthUser`` to
``request.state.user``. ``require_auth`` and ``require_role`` only read that
attached identity, so they must run after one of the authenticate
dependencies, e.g.:

    @router.get("/me", dependencies=[Depends(authenticate)])
    def me(user: Annotated[AuthUser, Depends(require_auth)]): ...

The attached identity has no first/last name; handlers needing them must
load the user.
"""

from typing import Annotated

from fastapi import Depends, Request

from schemas.auth_schemas import AuthUser
from services.token_service import TokenService
from utils.deps import get_token_service
from utils.exceptions import (
    ForbiddenError,
    InvalidTokenError,
    NoTokenError,
    TokenExpiredError,
    UnauthorizedError,
)


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token of an ``Authorization: Bearer <token>`` header, else None."""
    if not authorization:
        return None

    parts = authorization.split(' ')
    if len(parts) != 2 or parts[0] != 'Bearer' or not parts[1]:
        return None

    return parts[1]


def _attach_identity(request: Request, token: str, tokens: TokenService) -> AuthUser:
    try:
        payload = tokens.verify_access_token(token)
    except TokenExpiredError:
        raise
    except InvalidTokenError:
        raise InvalidTokenError()

    user = AuthUser(
        id=payload["sub"],
        email=payload.get("email", ""),
        roles=payload.get("roles") or []
    )
    request.state.user = user
    return user


def authenticate(request: Request, tokens: Annotated[TokenService, Depends(get_token_service)]) -> AuthUser:
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise NoTokenError()

    return _attach_identity(request, token, tokens)


def optional_authenticate(request: Request,
                          tokens: Annotated[TokenService, Depends(get_token_service)]) -> AuthUser | None:
    """Like ``authenticate`` but a request without credentials stays anonymous."""
    if request.headers.get("Authorization") is None:
        return None
    return authenticate(request, tokens)


def get_attached_user(request: Request) -> AuthUser | None:
    return getattr(request.state, "user", None)


def require_auth(request: Request) -> AuthUser:
    user = get_attached_user(request)
    if user is None:
        raise UnauthorizedError()
    return user


def require_role(*required_roles: str):
    """Dependency factory: the attached identity must hold one of ``required_roles``."""

    def check_role(request: Request) -> AuthUser:
        user = require_auth(request)
        if not set(user.roles) & set(required_roles):
            raise ForbiddenError(
                f"Insufficient permissions. Required roles: {', '.join(required_roles)}"
            )
        return user

    return check_role


current_user_dependency = Annotated[AuthUser, Depends(require_auth)]
