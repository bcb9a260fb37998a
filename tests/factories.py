"""Row and credential builders shared by the tests"""
from uuid import UUID, uuid4
from datetime import datetime
from typing import Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models import LiveSession, Phase, Practitioner, Profile, Role
from app.auth.middleware import JWTPayload, permissions_manager
from app.sessions.service import channel_for

# Bearer token -> payload for the requests of one test
TOKENS: Dict[str, JWTPayload] = {}


def auth_headers(user_id: UUID, *roles: str) -> Dict[str, str]:
    """Authorization header for a user holding the given realm roles."""
    token = f"token-{user_id}-{'-'.join(roles)}"
    TOKENS[token] = JWTPayload(
        user_id=user_id,
        email=f"{user_id}@example.com",
        roles=list(roles),
        permissions=permissions_manager.get_permissions_for_roles(list(roles)),
    )
    return {"Authorization": f"Bearer {token}"}


async def create_guest(db: AsyncSession, display_name: str = "Guest") -> Profile:
    profile = Profile(
        id=uuid4(),
        role=Role.GUEST.value,
        display_name=display_name,
        gallery_urls=[],
        specialties=[],
    )
    db.add(profile)
    await db.commit()
    return profile


async def create_practitioner(
    db: AsyncSession,
    display_name: str = "Practitioner",
    is_online: bool = True,
    in_service: bool = False,
) -> Profile:
    profile = Profile(
        id=uuid4(),
        role=Role.PRACTITIONER.value,
        display_name=display_name,
        gallery_urls=[],
        specialties=["tarot"],
    )
    db.add(profile)
    await db.flush()
    db.add(Practitioner(user_id=profile.id, is_online=is_online, in_service=in_service))
    await db.commit()
    return profile


async def create_session(
    db: AsyncSession,
    guest: Profile,
    practitioner: Profile,
    phase: Phase = Phase.WAITING,
    live_seconds: int = 600,
    created_at: Optional[datetime] = None,
    live_started_at: Optional[datetime] = None,
    **flags,
) -> LiveSession:
    """Insert a session directly, bypassing the lifecycle rules."""
    session_id = uuid4()
    session = LiveSession(
        id=session_id,
        guest_id=guest.id,
        practitioner_id=practitioner.id,
        phase=phase.value,
        live_seconds=live_seconds,
        acknowledged_practitioner=flags.get("acknowledged_practitioner", False),
        ready_practitioner=flags.get("ready_practitioner", False),
        ready_guest=flags.get("ready_guest", False),
        agora_channel=flags.get("agora_channel") or channel_for(session_id),
        live_started_at=live_started_at,
    )
    if created_at is not None:
        session.created_at = created_at
    db.add(session)
    await db.commit()
    return session


async def get_practitioner_row(session_factory, user_id: UUID) -> Practitioner:
    """Read presence through a fresh session so request commits are visible."""
    async with session_factory() as db:
        return await db.get(Practitioner, UUID(str(user_id)))


async def get_session_row(session_factory, session_id: UUID) -> LiveSession:
    async with session_factory() as db:
        return await db.get(LiveSession, UUID(str(session_id)))
