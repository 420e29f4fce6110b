import os

os.environ.setdefault("ENV", "testing")
os.environ.setdefault("JWT_SECRET", "test-access-secret-0123456789")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_DIR", "logs")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from main import app
from core.config import settings
from core.database import Base
from models.users import User
from services.credential_store import CredentialStore
from services.token_service import TokenService
from utils.deps import get_db, get_email_service, get_settings
from utils.hashing import get_password_hash
from tests.helpers import TEST_PASSWORD, FakeMailer

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False}
)


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)



@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh database with the default roles for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    CredentialStore(db).ensure_roles(["USER", "ADMIN"])
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def app_settings():
    """Settings served to the app; tests may replace fields with model_copy."""
    return settings


@pytest.fixture
async def client(session: Session, mailer: FakeMailer, app_settings):
    """
    Yields an HTTP client talking to the app with the test database,
    the fake mailer and the test settings.
    """
    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: mailer
    app.dependency_overrides[get_settings] = lambda: app_settings

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(settings)


@pytest.fixture
def active_user(session: Session) -> User:
    store = CredentialStore(session)
    user = store.create(
        email="dentist@example.com",
        hashed_password=get_password_hash(TEST_PASSWORD),
        first_name="Dana",
        last_name="Molar",
        phone="+16502530000"
    )
    store.assign_role(user, "USER")
    session.refresh(user)
    return user

