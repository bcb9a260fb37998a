import logging
from uuid import UUID, uuid4
from typing import Dict, List, Optional, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import LiveSession, Phase, Practitioner, Profile, Role
from app.sessions.repository import SessionRepository
from app.sessions.validators import SessionValidator
from app.sessions.timeouts import is_expired, waiting_cutoff
from app.sessions.exceptions import (
    AcknowledgeFirstException,
    GuestOnlyException,
    InvalidPhaseException,
    PractitionerBusyException,
    PractitionerRoleRequiredException,
    PractitionerUnavailableException,
    SessionEndedException,
    SessionNotFoundException,
)
from app.practitioners.exceptions import PractitionerNotFoundException
from app.practitioners.repository import PractitionerRepository
from app.profiles.repository import ProfileRepository
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)


def channel_for(session_id: UUID) -> str:
    """Media channel name, fixed for the life of the session"""
    return f"sess_{str(session_id)[:8]}"


class SessionService:
    """
    Session lifecycle: waiting -> live -> ended.

    Going live is never requested directly; it happens inside the call that
    sets the second readiness flag.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = SessionRepository(db)
        self.practitioner_repository = PractitionerRepository(db)
        self.profile_repository = ProfileRepository(db)
        self.validator = SessionValidator()

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def get_session(self, session_id: UUID) -> LiveSession:
        """Get a session by ID"""
        session = await self.repository.get_by_id(session_id)
        if not session:
            raise SessionNotFoundException(session_id)
        return session

    async def start_session(
        self,
        guest_id: UUID,
        practitioner_id: UUID,
        live_seconds: int,
    ) -> LiveSession:
        """
        Guest requests a session with an online practitioner.

        Steps:
        1. Verify the caller's profile is a guest profile
        2. Claim the practitioner (online and not in service) in one UPDATE
        3. Insert the waiting session; both writes commit together
        """
        guest = await self.profile_repository.get_by_id(guest_id)
        if not guest or guest.role != Role.GUEST:
            raise GuestOnlyException()

        try:
            claimed = await self.practitioner_repository.claim_for_service(practitioner_id)
            if not claimed:
                await self.db.rollback()
                practitioner = await self.practitioner_repository.get_by_id(practitioner_id)
                if practitioner is None:
                    raise PractitionerNotFoundException(practitioner_id)
                if not practitioner.is_online:
                    raise PractitionerUnavailableException()
                raise PractitionerBusyException()

            session_id = uuid4()
            await self.repository.add(LiveSession(
                id=session_id,
                guest_id=guest_id,
                practitioner_id=practitioner_id,
                phase=Phase.WAITING.value,
                live_seconds=live_seconds,
                acknowledged_practitioner=False,
                ready_practitioner=False,
                ready_guest=False,
                agora_channel=channel_for(session_id),
            ))
            await self._commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.info(f"Session {session_id} requested by guest {guest_id} for practitioner {practitioner_id}")
        return await self.get_session(session_id)

    async def acknowledge(self, session_id: UUID, user_id: UUID) -> LiveSession:
        """Practitioner confirms they have seen the request"""
        return await self._confirm_practitioner(session_id, user_id, action="acknowledge", ready=False)

    async def accept(self, session_id: UUID, user_id: UUID) -> LiveSession:
        """Acknowledge and ready-up in one step"""
        return await self._confirm_practitioner(session_id, user_id, action="accept", ready=True)

    async def _confirm_practitioner(
        self,
        session_id: UUID,
        user_id: UUID,
        action: str,
        ready: bool,
    ) -> LiveSession:
        session = await self.get_session(session_id)
        self.validator.validate_practitioner(session, user_id, action)
        await self._reject_if_expired(session)
        self.validator.validate_waiting(session)

        if not await self.repository.confirm_practitioner(session_id, ready=ready):
            await self.db.rollback()
            # Phase moved on between the read and the write
            self.validator.validate_waiting(await self.get_session(session_id))
            raise InvalidPhaseException()
        if ready:
            await self._promote_if_both_ready(session_id)
        await self._commit()

        return await self.get_session(session_id)

    async def mark_ready(self, session_id: UUID, user_id: UUID, who: Role) -> LiveSession:
        """
        Set one side's readiness flag.

        The practitioner side requires a prior acknowledgement. If both flags
        are now set and the session is still waiting, it goes live in the same
        transaction; only one of two concurrent callers performs that step.
        """
        session = await self.get_session(session_id)
        self.validator.validate_participant(session, user_id)
        await self._reject_if_expired(session)
        self.validator.validate_not_ended(session)
        if who == Role.PRACTITIONER and not session.acknowledged_practitioner:
            raise AcknowledgeFirstException()

        if who == Role.GUEST:
            updated = await self.repository.mark_guest_ready(session_id)
        else:
            updated = await self.repository.mark_practitioner_ready(session_id)
        if not updated:
            await self.db.rollback()
            raise SessionEndedException()

        await self._promote_if_both_ready(session_id)
        await self._commit()

        return await self.get_session(session_id)

    async def _reject_if_expired(self, session: LiveSession) -> None:
        """End a session that ran out of time instead of letting it move on."""
        if is_expired(session, utcnow()):
            await self.expire_if_needed(session)
            raise SessionEndedException()

    async def _promote_if_both_ready(self, session_id: UUID) -> bool:
        now = utcnow()
        went_live = await self.repository.promote_to_live(session_id, now, waiting_cutoff(now))
        if went_live:
            logger.info(f"Session {session_id} is live - both parties ready")
        return went_live

    async def reject(self, session_id: UUID, user_id: UUID) -> LiveSession:
        """Practitioner declines a waiting session and becomes available again"""
        session = await self.get_session(session_id)
        self.validator.validate_practitioner(session, user_id, "reject")
        self.validator.validate_waiting(session)

        if not await self._finish(session, only_waiting=True):
            await self.db.rollback()
            self.validator.validate_waiting(await self.get_session(session_id))
            raise InvalidPhaseException()
        await self._commit()

        logger.info(f"Session {session_id} rejected by practitioner {user_id}")
        return await self.get_session(session_id)

    async def end_session(self, session_id: UUID, user_id: UUID) -> LiveSession:
        """
        Either participant ends the session from any phase.

        Ending an ended session changes nothing; the practitioner's presence is
        only released by the call that actually ended it.
        """
        session = await self.get_session(session_id)
        self.validator.validate_participant(session, user_id)

        if await self._finish(session):
            await self._commit()
            logger.info(f"Session {session_id} ended by {user_id}")
        else:
            await self.db.rollback()

        return await self.get_session(session_id)

    async def _finish(self, session: LiveSession, only_waiting: bool = False) -> bool:
        """End the session and release its practitioner; caller commits."""
        ended = await self.repository.end(session.id, utcnow(), only_waiting=only_waiting)
        if ended:
            await self.practitioner_repository.release_from_service(session.practitioner_id)
        return ended

    async def expire_if_needed(self, session: LiveSession) -> LiveSession:
        """End a session whose waiting room or call length ran out."""
        if not is_expired(session, utcnow()):
            return session
        session_id, phase = session.id, session.phase
        if await self._finish(session):
            await self._commit()
            logger.info(f"Session {session_id} expired in phase {phase}")
        else:
            await self.db.rollback()
        return await self.get_session(session_id)

    async def expire_stale_sessions(self) -> Tuple[int, List[LiveSession]]:
        """
        End every expired session.

        Returns the number of sessions examined and the sessions that were ended,
        still carrying the phase they expired in.
        """
        now = utcnow()
        candidates = await self.repository.get_expiry_candidates(waiting_cutoff(now))
        expired = [session for session in candidates if is_expired(session, now)]

        canceled = []
        for session in expired:
            if await self._finish(session):
                canceled.append(session)
        await self._commit()

        for session in canceled:
            logger.info(f"Session {session.id} expired in phase {session.phase}")
        return len(candidates), canceled

    async def get_session_detail(
        self,
        session_id: UUID,
        user_id: UUID,
    ) -> Tuple[LiveSession, Dict[UUID, Profile]]:
        """Session plus both participants' profiles; participants only"""
        session = await self.get_session(session_id)
        self.validator.validate_participant(session, user_id)
        session = await self.expire_if_needed(session)

        profiles = await self.profile_repository.get_many([session.guest_id, session.practitioner_id])
        return session, profiles

    async def list_practitioner_sessions(
        self,
        user_id: UUID,
        practitioner_id: Optional[UUID] = None,
    ) -> Tuple[List[LiveSession], Dict[UUID, Profile], Practitioner]:
        """Waiting and live sessions of the calling practitioner"""
        if practitioner_id is not None and practitioner_id != user_id:
            raise PractitionerRoleRequiredException()

        profile = await self.profile_repository.get_by_id(user_id)
        if not profile or profile.role != Role.PRACTITIONER:
            raise PractitionerRoleRequiredException()
        practitioner = await self.practitioner_repository.get_by_id(user_id)
        if not practitioner:
            raise PractitionerNotFoundException(user_id)

        sessions = await self.repository.get_active_by_practitioner(user_id)
        profiles = await self.profile_repository.get_many(
            [s.guest_id for s in sessions] + [user_id]
        )
        return sessions, profiles, practitioner
