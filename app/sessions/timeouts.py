"""Waiting-room and live-call deadlines"""
from datetime import datetime, timedelta
from typing import Optional
from app.config import LIVE_GRACE_SECONDS, WAITING_TIMEOUT_SECONDS
from app.db.models import LiveSession, Phase

WAITING_TIMEOUT = timedelta(seconds=WAITING_TIMEOUT_SECONDS)
LIVE_GRACE = timedelta(seconds=LIVE_GRACE_SECONDS)


def waiting_cutoff(now: datetime) -> datetime:
    """Sessions created before this instant and still waiting have expired."""
    return now - WAITING_TIMEOUT


def deadline(session: LiveSession) -> Optional[datetime]:
    """When the session should be ended server-side, or None once ended."""
    if session.phase == Phase.WAITING:
        return session.created_at + WAITING_TIMEOUT
    if session.phase == Phase.LIVE:
        started = session.live_started_at or session.created_at
        return started + timedelta(seconds=session.live_seconds) + LIVE_GRACE
    return None


def is_expired(session: LiveSession, now: datetime) -> bool:
    """True if the session outlived its waiting room or its booked call length."""
    ends_at = deadline(session)
    return ends_at is not None and ends_at < now
