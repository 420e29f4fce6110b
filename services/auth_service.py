import secrets
from datetime import datetime, timezone, timedelta

from sqlalchemy.exc import SQLAlchemyError

from core.config import Settings
from models.users import User
from schemas.auth_schemas import AuthUser, RegisterRequest, TokenResponse
from services.credential_store import CredentialStore
from services.email_service import EmailService
from services.session_store import SessionStore
from services.token_service import TokenService, hash_token
from utils.exceptions import (
    AccountInactiveError,
    AppError,
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    InvalidPasswordError,
    InvalidRefreshTokenError,
    InvalidResetTokenError,
    UserNotFoundError,
)
from utils.hashing import get_password_hash, verify_password
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ROLE = "USER"
FORGOT_PASSWORD_MESSAGE = "If an account exists with this email, a password reset link has been sent."


def to_auth_user(user: User) -> AuthUser:
    return AuthUser(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        roles=user.role_names
    )


class AuthService:
    """
    Registration, login, logout, refresh and password flows.

    Built per request from its collaborators so tests can swap any of them.
    """

    def __init__(self, users: CredentialStore, sessions: SessionStore, tokens: TokenService,
                 mailer: EmailService, settings: Settings):
        self.users = users
        self.sessions = sessions
        self.tokens = tokens
        self.mailer = mailer
        self.settings = settings

    def register(self, request: RegisterRequest) -> TokenResponse:
        """
        Creates a user, links the default role and returns a token pair.

        Flow:
        1. Reject an already registered email
        2. Hash the password and persist the user
        3. Link the USER role (best-effort)
        4. Send the welcome email (best-effort)
        5. Issue tokens
        """
        if self.users.get_by_email(request.email):
            logger.warning(
                "Registration attempt with existing email",
                extra={"email": request.email}
            )
            raise EmailAlreadyExistsError()

        user = self.users.create(
            email=request.email,
            hashed_password=get_password_hash(request.password),
            first_name=request.first_name,
            last_name=request.last_name,
            phone=request.phone
        )

        self._assign_default_role(user)

        try:
            self.mailer.send_welcome_email(user.email, user.first_name)
        except Exception as e:
            logger.error(
                "Failed to send welcome email",
                extra={"user_id": user.id, "error_type": type(e).__name__}
            )

        logger.info(
            "User registered successfully",
            extra={"user_id": user.id, "email": user.email}
        )

        return self._issue_tokens(user)

    def login(self, email: str, password: str) -> TokenResponse:
        user = self.users.get_by_email(email)

        if not user:
            logger.warning("Login failed - user not found", extra={"email": email})
            raise InvalidCredentialsError()

        if not verify_password(password, user.hashed_password):
            logger.warning(
                "Login failed - invalid password",
                extra={"user_id": user.id, "email": email}
            )
            raise InvalidCredentialsError()

        # Checked only after the password so a wrong guess learns nothing
        if not user.is_active:
            logger.warning(
                "Login failed - inactive account",
                extra={"user_id": user.id, "email": email}
            )
            raise AccountInactiveError()

        self.users.touch_last_login(user)

        logger.info(
            "User logged in successfully",
            extra={"user_id": user.id, "email": user.email}
        )

        return self._issue_tokens(user)

    def refresh(self, refresh_token: str) -> TokenResponse:
        """
        Exchanges a refresh token for a new pair.

        Every failure is reported as the same InvalidRefreshTokenError. The
        presented session is kept unless REVOKE_REFRESH_ON_ROTATION is set.
        """
        try:
            user_id = self.tokens.verify_refresh_token(refresh_token)
        except AppError as e:
            logger.warning("Refresh failed - token rejected", extra={"reason": e.code})
            raise InvalidRefreshTokenError()

        session = self.sessions.find_valid(refresh_token)
        if session is None or session.user_id != user_id:
            logger.warning("Refresh failed - no active session", extra={"user_id": user_id})
            raise InvalidRefreshTokenError()

        user = self.users.get_by_id(user_id)
        if user is None or not user.is_active:
            logger.warning("Refresh failed - user not found or inactive", extra={"user_id": user_id})
            raise InvalidRefreshTokenError()

        if self.settings.REVOKE_REFRESH_ON_ROTATION:
            self.sessions.delete(session)

        logger.info("Access token refreshed", extra={"user_id": user.id})

        return self._issue_tokens(user)

    def logout(self, user_id: str) -> None:
        """Deletes every session of the user, on all devices."""
        deleted = self.sessions.delete_for_user(user_id)
        logger.info("User logged out", extra={"user_id": user_id, "sessions_deleted": deleted})

    def get_current_user(self, user_id: str) -> AuthUser:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return to_auth_user(user)

    def update_password(self, user_id: str, old_password: str, new_password: str) -> None:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError()

        if not verify_password(old_password, user.hashed_password):
            logger.warning("Password update failed - wrong current password", extra={"user_id": user_id})
            raise InvalidPasswordError()

        self.users.set_password(user, get_password_hash(new_password))

        if self.settings.REVOKE_SESSIONS_ON_PASSWORD_CHANGE:
            self.sessions.delete_for_user(user.id)

        logger.info("Password updated", extra={"user_id": user_id})

    def forgot_password(self, email: str) -> str:
        """
        Stores a reset token for ``email`` and mails it.

        Returns the same message whether or not the account exists.
        """
        user = self.users.get_by_email(email)

        if not user:
            logger.info(
                "Password reset requested for non-existent email",
                extra={"email": email}
            )
            return FORGOT_PASSWORD_MESSAGE

        reset_token = secrets.token_hex(32)
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=self.settings.PASSWORD_RESET_EXPIRE_MINUTES)
        self.users.set_reset_token(user, hash_token(reset_token), expires_at)

        try:
            self.mailer.send_password_reset_email(user.email, reset_token, user.first_name)
        except Exception as e:
            # The token is stored, the user can ask again
            logger.error(
                "Failed to send password reset email",
                extra={"user_id": user.id, "error_type": type(e).__name__}
            )

        logger.info("Password reset requested", extra={"user_id": user.id})

        return FORGOT_PASSWORD_MESSAGE

    def reset_password_with_token(self, reset_token: str, new_password: str) -> None:
        user = self.users.find_by_reset_token(hash_token(reset_token))

        if not user:
            logger.warning("Password reset failed - invalid or expired token")
            raise InvalidResetTokenError()

        self.users.consume_reset_token(user, get_password_hash(new_password))

        if self.settings.REVOKE_SESSIONS_ON_PASSWORD_CHANGE:
            self.sessions.delete_for_user(user.id)

        logger.info("Password reset successfully", extra={"user_id": user.id})

    def _assign_default_role(self, user: User) -> None:
        # A user without roles is tolerated, registration never fails here
        try:
            if not self.users.assign_role(user, DEFAULT_ROLE):
                logger.warning(
                    "Default role missing, user registered without roles",
                    extra={"user_id": user.id, "role": DEFAULT_ROLE}
                )
        except SQLAlchemyError as e:
            logger.warning(
                "Could not link default role",
                extra={"user_id": user.id, "role": DEFAULT_ROLE, "error_type": type(e).__name__}
            )

    def _issue_tokens(self, user: User) -> TokenResponse:
        roles = user.role_names
        access_token = self.tokens.create_access_token(user.id, user.email, roles)
        refresh_token, expires_at = self.tokens.create_refresh_token(user.id)

        self.sessions.create(user.id, refresh_token, expires_at)

        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self.tokens.access_token_ttl.total_seconds()),
            user=to_auth_user(user)
        )
