"""
Credential store: persisted users, their roles and reset-token fields.
"""

from datetime import datetime, timezone

from sqlalchemy import select, insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.roles import Role, user_roles
from models.users import User
from utils.exceptions import EmailAlreadyExistsError
from utils.logger import get_logger

logger = get_logger(__name__)


class CredentialStore:

    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).one_or_none()

    def get_by_id(self, user_id: str) -> User | None:
        return self.db.query(User).filter(User.id == user_id).one_or_none()

    def create(self, email: str, hashed_password: str, first_name: str, last_name: str,
               phone: str | None = None) -> User:
        user = User(
            email=email,
            hashed_password=hashed_password,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            is_active=True
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            self.db.rollback()
            logger.warning("Registration conflict on unique email", extra={"email": email})
            raise EmailAlreadyExistsError()
        self.db.refresh(user)
        return user

    def get_role(self, name: str) -> Role | None:
        return self.db.query(Role).filter(Role.name == name).one_or_none()

    def ensure_roles(self, names: list[str]) -> None:
        """Create any missing role rows."""
        existing = set(self.db.scalars(select(Role.name).where(Role.name.in_(names))))
        for name in names:
            if name not in existing:
                self.db.add(Role(name=name))
        self.db.commit()

    def assign_role(self, user: User, role_name: str) -> bool:
        """
        Link ``user`` to the role called ``role_name``.

        Linking is idempotent: an existing link is left alone.

        Returns:
            False if no such role exists, True otherwise
        """
        role = self.get_role(role_name)
        if role is None:
            return False

        linked = self.db.execute(
            select(user_roles.c.user_id).where(
                user_roles.c.user_id == user.id,
                user_roles.c.role_id == role.id
            )
        ).first()

        if linked is None:
            try:
                self.db.execute(insert(user_roles).values(user_id=user.id, role_id=role.id))
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                raise
            self.db.expire(user, ["roles"])

        return True

    def touch_last_login(self, user: User) -> None:
        user.last_login = datetime.now(timezone.utc)
        self.db.commit()

    def set_password(self, user: User, hashed_password: str) -> None:
        user.hashed_password = hashed_password
        self.db.commit()

    def set_reset_token(self, user: User, token_hash: str, expires_at: datetime) -> None:
        # Overwrites any earlier token, only the latest is usable
        user.reset_password_token = token_hash
        user.reset_password_expires_at = expires_at
        self.db.commit()

    def find_by_reset_token(self, token_hash: str) -> User | None:
        """Return the user owning ``token_hash`` if that token has not expired."""
        return self.db.query(User).filter(
            User.reset_password_token == token_hash,
            User.reset_password_expires_at > datetime.now(timezone.utc)
        ).first()

    def consume_reset_token(self, user: User, hashed_password: str) -> None:
        """Store the new password and clear both reset fields in one commit."""
        user.hashed_password = hashed_password
        user.reset_password_token = None
        user.reset_password_expires_at = None
        self.db.commit()
