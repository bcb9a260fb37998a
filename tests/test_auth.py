import pytest
from httpx import AsyncClient
from uuid import uuid4
from jose import jwt
from app.main import app
from app.db.models import Profile
from app.auth.exceptions import AccountAlreadyExistsException, InvalidCredentialsException
from app.auth.identity import get_identity_gateway
from factories import auth_headers, get_practitioner_row


class FakeGateway:
    """In-memory stand-in for the Keycloak gateway"""

    def __init__(self):
        self.accounts = {}
        self.revoked = []

    def register(self, email, password, full_name, role):
        if email in self.accounts:
            raise AccountAlreadyExistsException(email)
        self.accounts[email] = {"id": str(uuid4()), "password": password, "role": role}

    def login(self, email, password):
        account = self.accounts.get(email)
        if not account or account["password"] != password:
            raise InvalidCredentialsException()
        access_token = jwt.encode({"sub": account["id"]}, "secret", algorithm="HS256")
        return {"access_token": access_token, "refresh_token": f"refresh-{account['id']}"}

    def logout(self, refresh_token):
        self.revoked.append(refresh_token)


@pytest.fixture
def gateway():
    gateway = FakeGateway()
    app.dependency_overrides[get_identity_gateway] = lambda: gateway
    return gateway


async def signup(client, email="reader@example.com", role="practitioner"):
    return await client.post(
        "/auth/signup",
        json={"email": email, "password": "secret1", "fullName": "Madame Reader", "role": role},
    )


@pytest.mark.asyncio
async def test_signup_practitioner(client: AsyncClient, session_factory, gateway):
    response = await signup(client)

    assert response.status_code == 201
    data = response.json()
    assert data["accessToken"]
    assert data["refreshToken"].startswith("refresh-")
    assert data["user"]["email"] == "reader@example.com"
    assert data["profile"]["displayName"] == "Madame Reader"
    assert data["profile"]["role"] == "practitioner"

    presence = await get_practitioner_row(session_factory, data["user"]["id"])
    assert presence.is_online is False
    assert presence.in_service is False
    assert presence.review_count == 0


@pytest.mark.asyncio
async def test_signup_guest_has_no_presence(client: AsyncClient, session_factory, gateway):
    response = await signup(client, role="guest")

    assert response.status_code == 201
    assert await get_practitioner_row(session_factory, response.json()["user"]["id"]) is None


@pytest.mark.asyncio
async def test_signup_existing_account(client: AsyncClient, gateway):
    await signup(client)
    response = await signup(client)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_signup_validation(client: AsyncClient, gateway):
    response = await client.post(
        "/auth/signup",
        json={"email": "not-an-email", "password": "123", "fullName": "X", "role": "admin"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login(client: AsyncClient, gateway):
    user_id = (await signup(client, role="guest")).json()["user"]["id"]

    response = await client.post(
        "/auth/login", json={"email": "reader@example.com", "password": "secret1"}
    )

    assert response.status_code == 200
    assert response.json()["user"]["id"] == user_id
    assert response.json()["profile"]["role"] == "guest"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, gateway):
    await signup(client)
    response = await client.post("/auth/login", json={"email": "reader@example.com", "password": "wrong"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_without_profile(client: AsyncClient, gateway):
    gateway.register("stray@example.com", "secret1", "Stray", "guest")

    response = await client.post("/auth/login", json={"email": "stray@example.com", "password": "secret1"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Account not found. Please sign up first."


@pytest.mark.asyncio
async def test_logout(client: AsyncClient, gateway):
    response = await client.post("/auth/logout", json={"refreshToken": "refresh-1"})

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert gateway.revoked == ["refresh-1"]


@pytest.mark.asyncio
async def test_current_user(client: AsyncClient, practitioner, practitioner_headers, guest, guest_headers):
    response = await client.get("/auth/user", headers=practitioner_headers)
    data = response.json()
    assert data["id"] == str(practitioner.id)
    assert data["practitioner"]["isOnline"] is True

    response = await client.get("/auth/user", headers=guest_headers)
    assert response.json()["practitioner"] is None


@pytest.mark.asyncio
async def test_role_init(client: AsyncClient, session_factory):
    user_id = uuid4()
    headers = auth_headers(user_id, "practitioner")

    response = await client.post("/auth/role-init", json={"role": "practitioner"}, headers=headers)

    assert response.status_code == 201
    assert response.json()["displayName"] == "New User"
    assert await get_practitioner_row(session_factory, user_id) is not None

    response = await client.post("/auth/role-init", json={"role": "practitioner"}, headers=headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_role_init_rejects_role_the_token_does_not_hold(client: AsyncClient, session_factory):
    user_id = uuid4()

    response = await client.post(
        "/auth/role-init", json={"role": "practitioner"}, headers=auth_headers(user_id, "guest")
    )

    assert response.status_code == 403
    assert await get_practitioner_row(session_factory, user_id) is None
    async with session_factory() as db:
        assert await db.get(Profile, user_id) is None
