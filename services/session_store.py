"""
Session store: one row per issued refresh token.
"""

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from models.sessions import UserSession
from services.token_service import hash_token


class SessionStore:

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: str, refresh_token: str, expires_at: datetime) -> UserSession:
        session = UserSession(
            user_id=user_id,
            token_hash=hash_token(refresh_token),
            expires_at=expires_at
        )
        self.db.add(session)
        self.db.commit()
        return session

    def find_valid(self, refresh_token: str) -> UserSession | None:
        """Return the unexpired session for ``refresh_token``, if any."""
        return self.db.query(UserSession).filter(
            UserSession.token_hash == hash_token(refresh_token),
            UserSession.expires_at > datetime.now(timezone.utc)
        ).first()

    def delete(self, session: UserSession) -> None:
        self.db.delete(session)
        self.db.commit()

    def delete_for_user(self, user_id: str) -> int:
        """Delete every session of ``user_id`` and return how many were removed."""
        deleted = self.db.query(UserSession).filter(
            UserSession.user_id == user_id
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    def purge_expired(self) -> int:
        deleted = self.db.query(UserSession).filter(
            UserSession.expires_at <= datetime.now(timezone.utc)
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted
