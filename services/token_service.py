import secrets
import hashlib
from datetime import datetime, timezone, timedelta
from jose import jwt, JWTError, ExpiredSignatureError
from core.config import Settings
from utils.exceptions import TokenExpiredError, TokenMalformedError, InvalidTokenKindError


def hash_token(token: str) -> str:
    """SHA-256 hex digest used to store refresh and reset tokens."""
    return hashlib.sha256(token.encode()).hexdigest()


class TokenService:
    """
    Creates and verifies the two JWT kinds.

    Access tokens are short lived and self-contained. Refresh tokens are
    long lived, signed with a separate secret, and only accepted by the auth
    service when a matching session row exists. Nothing here touches the
    database.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    def create_access_token(self, user_id: str, email: str, roles: list[str], expires_delta: timedelta = None) -> str:
        """
        Creates a signed access token.

        Args:
            user_id: User's ID, stored as ``sub``
            email: User's email
            roles: Role names granted to the user
            expires_delta: Token lifetime (default: ACCESS_TOKEN_EXPIRE_MINUTES)
        """
        if expires_delta is None:
            expires_delta = self.access_token_ttl

        now = datetime.now(timezone.utc)

        payload = {
            "sub": user_id,
            "email": email,
            "roles": list(roles),
            "type": "access",
            "iss": self.settings.JWT_ISSUER,
            "aud": self.settings.JWT_AUDIENCE,
            "iat": now,
            "exp": now + expires_delta
        }

        return jwt.encode(payload, self.settings.JWT_SECRET, algorithm=self.settings.JWT_ALGORITHM)

    def create_refresh_token(self, user_id: str, expires_delta: timedelta = None) -> tuple[str, datetime]:
        """
        Creates a signed refresh token.

        A random ``jti`` keeps tokens issued within the same second distinct.

        Returns:
            Tuple of (refresh_token_string, expires_at)
        """
        if expires_delta is None:
            expires_delta = timedelta(days=self.settings.REFRESH_TOKEN_EXPIRE_DAYS)

        now = datetime.now(timezone.utc)
        expires_at = now + expires_delta

        payload = {
            "sub": user_id,
            "type": "refresh",
            "jti": secrets.token_urlsafe(16),
            "iss": self.settings.JWT_ISSUER,
            "iat": now,
            "exp": expires_at
        }

        token = jwt.encode(payload, self.settings.JWT_REFRESH_SECRET, algorithm=self.settings.JWT_ALGORITHM)
        return token, expires_at

    def _decode(self, token: str, key: str, audience: str | None = None) -> dict:
        try:
            return jwt.decode(
                token,
                key,
                algorithms=[self.settings.JWT_ALGORITHM],
                audience=audience,
                issuer=self.settings.JWT_ISSUER
            )
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError:
            raise TokenMalformedError()

    def verify_access_token(self, token: str) -> dict:
        """
        Verifies signature, expiry, issuer and audience of an access token.

        Raises:
            TokenExpiredError, TokenMalformedError, InvalidTokenKindError
        """
        payload = self._decode(token, self.settings.JWT_SECRET, audience=self.settings.JWT_AUDIENCE)

        if payload.get("type") != "access":
            raise InvalidTokenKindError()
        if not payload.get("sub"):
            raise TokenMalformedError()

        return payload

    def verify_refresh_token(self, token: str) -> str:
        """
        Verifies a refresh token and returns the user id it was issued for.

        Raises:
            TokenExpiredError, TokenMalformedError, InvalidTokenKindError
        """
        payload = self._decode(token, self.settings.JWT_REFRESH_SECRET)

        if payload.get("type") != "refresh":
            raise InvalidTokenKindError()

        user_id = payload.get("sub")
        if not user_id:
            raise TokenMalformedError()

        return user_id
