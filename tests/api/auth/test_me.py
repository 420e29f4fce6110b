from datetime import timedelta
from tests.helpers import bearer, login


async def test_me_returns_public_profile(client, active_user):
    tokens = (await login(client, active_user.email)).json()["data"]

    response = await client.get("/api/auth/me", headers=bearer(tokens["accessToken"]))

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": None,
        "data": {
            "id": active_user.id,
            "email": "dentist@example.com",
            "firstName": "Dana",
            "lastName": "Molar",
            "roles": ["USER"],
        },
    }


async def test_me_without_header(client):
    response = await client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "message": "No authentication token provided",
        "code": "NO_TOKEN",
    }


async def test_me_with_malformed_header(client, active_user, token_service):
    token = token_service.create_access_token(active_user.id, active_user.email, ["USER"])

    for header in (f"Token {token}", f"Bearer {token} extra", token):
        response = await client.get("/api/auth/me", headers={"Authorization": header})
        assert response.status_code == 401
        assert response.json()["code"] == "NO_TOKEN"


async def test_me_with_expired_token(client, active_user, token_service):
    """Expiry has its own code so clients know to refresh."""
    token = token_service.create_access_token(
        active_user.id, active_user.email, ["USER"], expires_delta=timedelta(seconds=-1)
    )

    response = await client.get("/api/auth/me", headers=bearer(token))

    assert response.status_code == 401
    assert response.json()["code"] == "TOKEN_EXPIRED"


async def test_me_with_invalid_token(client):
    response = await client.get("/api/auth/me", headers=bearer("not.a.token"))

    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"


async def test_me_with_refresh_token(client, active_user):
    tokens = (await login(client, active_user.email)).json()["data"]

    response = await client.get("/api/auth/me", headers=bearer(tokens["refreshToken"]))

    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"


async def test_me_for_deleted_user(client, active_user, session, token_service):
    token = token_service.create_access_token(active_user.id, active_user.email, ["USER"])
    session.delete(active_user)
    session.commit()

    response = await client.get("/api/auth/me", headers=bearer(token))

    assert response.status_code == 404
    assert response.json()["code"] == "USER_NOT_FOUND"
