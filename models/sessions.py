from core.database import Base
from sqlalchemy import Column, DateTime, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin

class UserSession(Base, CreatedAtMixin):
    """
    A refresh-token session.

    One row is written for every issued refresh token. The token itself is
    never stored, only its SHA-256 digest. Rows are deleted on logout; expired
    rows are ignored on lookup and removed by ``SessionStore.purge_expired``.
    """
    __tablename__ = "sessions"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="sessions")

    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
