import uuid
from core.database import Base
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin, UpdatedAtMixin
from models.roles import user_roles

class User(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "users"

    #pk
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    #relationships
    roles = relationship("Role", secondary=user_roles, back_populates="users", lazy="selectin")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    # Password reset fields, only the SHA-256 digest of the emailed token is kept
    reset_password_token = Column(String(64), nullable=True, index=True)
    reset_password_expires_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def role_names(self) -> list[str]:
        return [role.name for role in self.roles]
