"""Session Repository Layer"""
from uuid import UUID
from datetime import datetime
from typing import Optional, List
from sqlalchemy import select, update, and_, or_
from app.db.models import LiveSession, Phase
from app.db.repository import BaseRepository


class SessionRepository(BaseRepository):
    """
    Repository for session rows.

    Every state change is a conditional UPDATE whose WHERE clause restates the
    precondition, so concurrent callers cannot both pass a stale check.
    Nothing here commits; the service owns the transaction.
    """

    async def add(self, session: LiveSession) -> LiveSession:
        """Stage a new session in the current transaction"""
        self.db.add(session)
        await self.db.flush()
        return session

    async def get_by_id(self, session_id: UUID) -> Optional[LiveSession]:
        """Get session by ID, bypassing stale identity-map state"""
        stmt = (
            select(LiveSession)
            .where(LiveSession.id == session_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_channel(self, agora_channel: str) -> List[LiveSession]:
        """
        Sessions bound to a media channel, newest first.

        Channel names are a short prefix of the session id, so more than one
        session can share a name over time.
        """
        stmt = (
            select(LiveSession)
            .where(LiveSession.agora_channel == agora_channel)
            .order_by(LiveSession.created_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_active_by_practitioner(self, practitioner_id: UUID, limit: int = 100) -> List[LiveSession]:
        """Waiting and live sessions of a practitioner, newest first"""
        stmt = select(LiveSession).where(
            LiveSession.practitioner_id == practitioner_id,
            LiveSession.phase.in_([Phase.WAITING.value, Phase.LIVE.value]),
        ).order_by(LiveSession.created_at.desc()).limit(limit)
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def get_expiry_candidates(self, waiting_cutoff: datetime) -> List[LiveSession]:
        """
        Waiting sessions older than the cutoff, plus every live session.

        Live deadlines depend on each row's live_seconds and are checked by the caller.
        """
        stmt = select(LiveSession).where(
            or_(
                and_(
                    LiveSession.phase == Phase.WAITING.value,
                    LiveSession.created_at < waiting_cutoff,
                ),
                LiveSession.phase == Phase.LIVE.value,
            )
        )
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def confirm_practitioner(self, session_id: UUID, ready: bool) -> bool:
        """Set acknowledged (and optionally ready) while the session is waiting"""
        values = {"acknowledged_practitioner": True}
        if ready:
            values["ready_practitioner"] = True
        return await self._apply(
            update(LiveSession)
            .where(LiveSession.id == session_id, LiveSession.phase == Phase.WAITING.value)
            .values(**values)
        )

    async def mark_guest_ready(self, session_id: UUID) -> bool:
        return await self._apply(
            update(LiveSession)
            .where(LiveSession.id == session_id, LiveSession.phase != Phase.ENDED.value)
            .values(ready_guest=True)
        )

    async def mark_practitioner_ready(self, session_id: UUID) -> bool:
        """Only succeeds once the practitioner has acknowledged"""
        return await self._apply(
            update(LiveSession)
            .where(
                LiveSession.id == session_id,
                LiveSession.phase != Phase.ENDED.value,
                LiveSession.acknowledged_practitioner.is_(True),
            )
            .values(ready_practitioner=True)
        )

    async def promote_to_live(self, session_id: UUID, now: datetime, waiting_cutoff: datetime) -> bool:
        """
        Move a waiting session to live once both sides are ready; fires at most once.

        Sessions created before waiting_cutoff have outlived the waiting room and stay put.
        """
        return await self._apply(
            update(LiveSession)
            .where(
                LiveSession.id == session_id,
                LiveSession.phase == Phase.WAITING.value,
                LiveSession.ready_guest.is_(True),
                LiveSession.ready_practitioner.is_(True),
                LiveSession.created_at >= waiting_cutoff,
            )
            .values(phase=Phase.LIVE.value, live_started_at=now)
        )

    async def end(self, session_id: UUID, now: datetime, only_waiting: bool = False) -> bool:
        """End a session; False when it already ended (or was not waiting)"""
        stmt = update(LiveSession).where(LiveSession.id == session_id)
        if only_waiting:
            stmt = stmt.where(LiveSession.phase == Phase.WAITING.value)
        else:
            stmt = stmt.where(LiveSession.phase != Phase.ENDED.value)
        return await self._apply(stmt.values(phase=Phase.ENDED.value, ended_at=now))
