from jose import jwt
from core.config import settings
from models.sessions import UserSession
from tests.helpers import TEST_PASSWORD, login


async def test_login_success(client, active_user, session):
    """Test successful login returns a token pair and stores a session."""
    response = await login(client, active_user.email)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Login successful"

    data = body["data"]
    assert data["tokenType"] == "bearer"
    assert data["user"] == {
        "id": active_user.id,
        "email": "dentist@example.com",
        "firstName": "Dana",
        "lastName": "Molar",
        "roles": ["USER"],
    }

    payload = jwt.decode(
        data["accessToken"],
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE
    )
    assert payload["sub"] == active_user.id
    assert payload["email"] == active_user.email
    assert payload["roles"] == ["USER"]
    assert payload["iss"] == "dental-lab-api"

    assert session.query(UserSession).filter(UserSession.user_id == active_user.id).count() == 1


async def test_login_updates_last_login(client, active_user, session):
    assert active_user.last_login is None

    response = await login(client, active_user.email)
    assert response.status_code == 200

    session.refresh(active_user)
    assert active_user.last_login is not None


async def test_each_login_creates_a_session(client, active_user, session):
    """Concurrent devices get independent sessions."""
    first = await login(client, active_user.email)
    second = await login(client, active_user.email)

    assert first.json()["data"]["refreshToken"] != second.json()["data"]["refreshToken"]
    assert session.query(UserSession).filter(UserSession.user_id == active_user.id).count() == 2


async def test_wrong_password_and_unknown_email_are_indistinguishable(client, active_user):
    """Wrong password and unknown email give the same error."""
    wrong_password = await login(client, active_user.email, "WrongPassword123")
    unknown_email = await login(client, "nobody@example.com")

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {
        "success": False,
        "message": "Invalid email or password",
        "code": "INVALID_CREDENTIALS",
    }


async def test_login_inactive_user(client, active_user, session):
    """Inactive accounts are refused only after a correct password."""
    active_user.is_active = False
    session.commit()

    response = await login(client, active_user.email)
    assert response.status_code == 403
    assert response.json()["code"] == "ACCOUNT_INACTIVE"

    response = await login(client, active_user.email, "WrongPassword123")
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


async def test_login_email_is_case_sensitive_as_stored(client, active_user):
    response = await login(client, "Dentist@example.com", TEST_PASSWORD)

    assert response.status_code == 401


async def test_login_missing_password(client):
    response = await client.post("/api/auth/login", json={"email": "dentist@example.com"})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
