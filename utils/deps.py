from core.database import SessionLocal
from typing import Annotated
from fastapi import Depends
from sqlalchemy.orm import Session
from core.config import Settings, settings
from services.auth_service import AuthService
from services.credential_store import CredentialStore
from services.email_service import EmailService
from services.session_store import SessionStore
from services.token_service import TokenService


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

db_dependency = Annotated[Session, Depends(get_db)]


def get_settings() -> Settings:
    return settings


def get_token_service(app_settings: Annotated[Settings, Depends(get_settings)]) -> TokenService:
    return TokenService(app_settings)


def get_email_service(app_settings: Annotated[Settings, Depends(get_settings)]) -> EmailService:
    return EmailService(app_settings)


def get_auth_service(
    db: db_dependency,
    tokens: Annotated[TokenService, Depends(get_token_service)],
    mailer: Annotated[EmailService, Depends(get_email_service)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> AuthService:
    return AuthService(
        users=CredentialStore(db),
        sessions=SessionStore(db),
        tokens=tokens,
        mailer=mailer,
        settings=app_settings
    )

auth_service_dependency = Annotated[AuthService, Depends(get_auth_service)]
