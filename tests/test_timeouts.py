import pytest
from datetime import timedelta
from types import SimpleNamespace
from httpx import AsyncClient
from uuid import uuid4
from app.db.models import Phase
from app.sessions.repository import SessionRepository
from app.sessions.sweeper import sweep_once
from app.sessions.timeouts import LIVE_GRACE, WAITING_TIMEOUT, deadline, is_expired, waiting_cutoff
from app.utils.clock import utcnow
from factories import auth_headers, create_practitioner, create_session, get_practitioner_row, get_session_row


def stub(phase, created_ago=0, live_ago=None, live_seconds=600):
    now = utcnow()
    return SimpleNamespace(
        phase=phase.value,
        created_at=now - timedelta(seconds=created_ago),
        live_started_at=None if live_ago is None else now - timedelta(seconds=live_ago),
        live_seconds=live_seconds,
    )


def test_waiting_room_deadline():
    session = stub(Phase.WAITING)
    assert deadline(session) == session.created_at + WAITING_TIMEOUT


def test_waiting_session_expires_after_timeout():
    now = utcnow()
    assert not is_expired(stub(Phase.WAITING, created_ago=60), now)
    assert is_expired(stub(Phase.WAITING, created_ago=WAITING_TIMEOUT.total_seconds() + 5), now)


def test_live_session_gets_grace_period():
    now = utcnow()
    within_grace = stub(Phase.LIVE, created_ago=700, live_ago=610, live_seconds=600)
    past_grace = stub(Phase.LIVE, created_ago=900, live_ago=600 + LIVE_GRACE.total_seconds() + 5)
    assert not is_expired(within_grace, now)
    assert is_expired(past_grace, now)


def test_ended_session_never_expires():
    session = stub(Phase.ENDED, created_ago=100000)
    assert deadline(session) is None
    assert not is_expired(session, utcnow())


async def stale_waiting(db, guest, practitioner):
    return await create_session(
        db, guest, practitioner, created_at=utcnow() - WAITING_TIMEOUT - timedelta(seconds=30)
    )


@pytest.mark.asyncio
async def test_check_timeouts_ends_stale_sessions(
    client: AsyncClient, session_factory, db_session, guest, practitioner
):
    stale = await stale_waiting(db_session, guest, practitioner)
    other = await create_practitioner(db_session, in_service=True)
    overrun = await create_session(
        db_session, guest, other, phase=Phase.LIVE, live_seconds=60,
        created_at=utcnow() - timedelta(seconds=600),
        live_started_at=utcnow() - timedelta(seconds=500),
    )
    fresh = await create_session(db_session, guest, practitioner)

    response = await client.post("/sessions/check-timeouts", headers=auth_headers(uuid4(), "admin"))

    assert response.status_code == 200
    data = response.json()
    assert data["canceled"] == 2
    assert data["checked"] == 2
    phases = {item["sessionId"]: item["phase"] for item in data["sessions"]}
    assert phases == {str(stale.id): "waiting", str(overrun.id): "live"}

    assert (await get_session_row(session_factory, stale.id)).phase == Phase.ENDED
    assert (await get_session_row(session_factory, overrun.id)).ended_at is not None
    assert (await get_session_row(session_factory, fresh.id)).phase == Phase.WAITING
    assert (await get_practitioner_row(session_factory, other.id)).in_service is False


@pytest.mark.asyncio
async def test_check_timeouts_requires_admin(client: AsyncClient, guest_headers):
    response = await client.post("/sessions/check-timeouts", headers=guest_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_reading_stale_session_expires_it(
    client: AsyncClient, session_factory, db_session, guest, practitioner, guest_headers
):
    stale = await stale_waiting(db_session, guest, practitioner)

    response = await client.get(f"/sessions/{stale.id}", headers=guest_headers)

    assert response.status_code == 200
    assert response.json()["phase"] == "ended"


@pytest.mark.asyncio
async def test_sweep_once(session_factory, db_session, guest, practitioner):
    stale = await stale_waiting(db_session, guest, practitioner)

    assert await sweep_once(session_factory) == 1
    assert await sweep_once(session_factory) == 0
    assert (await get_session_row(session_factory, stale.id)).phase == Phase.ENDED


async def post_action(client, path, session_id, headers, **extra):
    return await client.post(
        f"/sessions/{path}", json={"sessionId": str(session_id), **extra}, headers=headers
    )


@pytest.mark.asyncio
async def test_accept_after_waiting_timeout_ends_session(
    client: AsyncClient, session_factory, db_session, guest
):
    busy = await create_practitioner(db_session, in_service=True)
    stale = await stale_waiting(db_session, guest, busy)

    response = await post_action(client, "accept", stale.id, auth_headers(busy.id, "practitioner"))

    assert response.status_code == 409
    row = await get_session_row(session_factory, stale.id)
    assert row.phase == Phase.ENDED
    assert row.live_started_at is None
    assert row.ready_practitioner is False
    assert (await get_practitioner_row(session_factory, busy.id)).in_service is False


@pytest.mark.asyncio
async def test_acknowledge_after_waiting_timeout_is_rejected(
    client: AsyncClient, session_factory, db_session, guest, practitioner, practitioner_headers
):
    stale = await stale_waiting(db_session, guest, practitioner)

    response = await post_action(client, "acknowledge", stale.id, practitioner_headers)

    assert response.status_code == 409
    row = await get_session_row(session_factory, stale.id)
    assert row.phase == Phase.ENDED
    assert row.acknowledged_practitioner is False


@pytest.mark.asyncio
async def test_ready_after_waiting_timeout_never_goes_live(
    client: AsyncClient, session_factory, db_session, guest, practitioner, guest_headers
):
    stale = await create_session(
        db_session, guest, practitioner,
        created_at=utcnow() - timedelta(hours=1),
        acknowledged_practitioner=True,
        ready_practitioner=True,
    )

    response = await post_action(client, "ready", stale.id, guest_headers, who="guest")

    assert response.status_code == 409
    row = await get_session_row(session_factory, stale.id)
    assert row.phase == Phase.ENDED
    assert row.live_started_at is None


@pytest.mark.asyncio
async def test_promote_to_live_skips_sessions_past_waiting_timeout(
    session_factory, db_session, guest, practitioner
):
    stale = await create_session(
        db_session, guest, practitioner,
        created_at=utcnow() - timedelta(hours=1),
        acknowledged_practitioner=True,
        ready_practitioner=True,
        ready_guest=True,
    )

    async with session_factory() as db:
        now = utcnow()
        assert await SessionRepository(db).promote_to_live(stale.id, now, waiting_cutoff(now)) is False
        await db.commit()

    assert (await get_session_row(session_factory, stale.id)).phase == Phase.WAITING
