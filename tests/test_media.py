import pytest
from httpx import AsyncClient
from app.main import app
from app.db.models import Phase
from app.media.token_minter import AgoraTokenMinter, get_token_minter
from factories import auth_headers, create_guest, create_practitioner, create_session


class RecordingMinter(AgoraTokenMinter):
    def __init__(self, configured: bool = True):
        super().__init__(
            app_id="a" * 32 if configured else None,
            app_certificate="b" * 32 if configured else None,
        )
        self.calls = []

    def mint(self, channel: str, account: str) -> str:
        self.calls.append((channel, account))
        return f"token-for-{account}"


@pytest.fixture
def minter():
    minter = RecordingMinter()
    app.dependency_overrides[get_token_minter] = lambda: minter
    return minter


@pytest.mark.asyncio
async def test_both_sides_join_same_channel(
    client: AsyncClient, minter, db_session, guest, practitioner, guest_headers, practitioner_headers
):
    session = await create_session(db_session, guest, practitioner, phase=Phase.LIVE)

    guest_token = await client.get(
        "/agora/token", params={"channel": session.agora_channel}, headers=guest_headers
    )
    practitioner_token = await client.get(
        "/agora/token", params={"channel": session.agora_channel}, headers=practitioner_headers
    )

    assert guest_token.status_code == 200
    assert guest_token.json() == {
        "token": f"token-for-guest_{guest.id}",
        "appId": "a" * 32,
        "uid": f"guest_{guest.id}",
    }
    assert practitioner_token.json()["uid"] == f"practitioner_{practitioner.id}"
    assert minter.calls == [
        (session.agora_channel, f"guest_{guest.id}"),
        (session.agora_channel, f"practitioner_{practitioner.id}"),
    ]


@pytest.mark.asyncio
async def test_matching_uid_accepted(client: AsyncClient, minter, db_session, guest, practitioner, guest_headers):
    session = await create_session(db_session, guest, practitioner, phase=Phase.LIVE)

    response = await client.get(
        "/agora/token",
        params={"channel": session.agora_channel, "uid": f"guest_{guest.id}"},
        headers=guest_headers,
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_foreign_uid_forbidden(
    client: AsyncClient, minter, db_session, guest, practitioner, guest_headers
):
    session = await create_session(db_session, guest, practitioner, phase=Phase.LIVE)

    response = await client.get(
        "/agora/token",
        params={"channel": session.agora_channel, "uid": f"practitioner_{practitioner.id}"},
        headers=guest_headers,
    )

    assert response.status_code == 403
    assert minter.calls == []


@pytest.mark.asyncio
async def test_outsider_forbidden(client: AsyncClient, minter, db_session, guest, practitioner):
    session = await create_session(db_session, guest, practitioner, phase=Phase.LIVE)
    outsider = await create_guest(db_session)

    response = await client.get(
        "/agora/token", params={"channel": session.agora_channel}, headers=auth_headers(outsider.id, "guest")
    )

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("phase", [Phase.WAITING, Phase.ENDED])
async def test_session_must_be_live(
    client: AsyncClient, minter, db_session, guest, practitioner, guest_headers, phase
):
    session = await create_session(db_session, guest, practitioner, phase=phase)

    response = await client.get("/agora/token", params={"channel": session.agora_channel}, headers=guest_headers)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_unknown_channel(client: AsyncClient, minter, guest_headers):
    response = await client.get("/agora/token", params={"channel": "sess_deadbeef"}, headers=guest_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_missing_credentials(client: AsyncClient, db_session, guest, practitioner, guest_headers):
    app.dependency_overrides[get_token_minter] = lambda: RecordingMinter(configured=False)
    session = await create_session(db_session, guest, practitioner, phase=Phase.LIVE)

    response = await client.get("/agora/token", params={"channel": session.agora_channel}, headers=guest_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Agora credentials not configured"


def test_real_token_is_versioned():
    minter = AgoraTokenMinter(app_id="970CA35de60c44645bbae8a215061b33", app_certificate="5CFd2fd1755d40ecb72977518be15d3b")
    token = minter.mint("sess_12345678", "guest_42")
    assert token.startswith("006")


@pytest.mark.asyncio
async def test_shared_channel_name_resolves_to_callers_session(
    client: AsyncClient, minter, db_session, guest, practitioner, guest_headers
):
    mine = await create_session(db_session, guest, practitioner, phase=Phase.LIVE)
    other_guest = await create_guest(db_session)
    other_practitioner = await create_practitioner(db_session, in_service=True)
    await create_session(
        db_session, other_guest, other_practitioner, phase=Phase.LIVE, agora_channel=mine.agora_channel
    )

    response = await client.get("/agora/token", params={"channel": mine.agora_channel}, headers=guest_headers)
    other = await client.get(
        "/agora/token", params={"channel": mine.agora_channel}, headers=auth_headers(other_guest.id, "guest")
    )

    assert response.status_code == 200
    assert response.json()["uid"] == f"guest_{guest.id}"
    assert other.status_code == 200
    assert other.json()["uid"] == f"guest_{other_guest.id}"
