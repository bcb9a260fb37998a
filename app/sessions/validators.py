"""Validation logic for consultation sessions"""
from uuid import UUID
from app.db.models import LiveSession, Phase, Role
from app.sessions.exceptions import (
    InvalidPhaseException,
    NotParticipantException,
    PractitionerOnlyException,
    SessionEndedException,
)


class SessionValidator:
    """Validates caller and phase rules for session operations"""

    def validate_participant(self, session: LiveSession, user_id: UUID) -> Role:
        """Return the caller's side of the session or raise 403"""
        if user_id == session.guest_id:
            return Role.GUEST
        if user_id == session.practitioner_id:
            return Role.PRACTITIONER
        raise NotParticipantException()

    def validate_practitioner(self, session: LiveSession, user_id: UUID, action: str) -> None:
        if user_id != session.practitioner_id:
            raise PractitionerOnlyException(action)

    def validate_not_ended(self, session: LiveSession) -> None:
        if session.phase == Phase.ENDED:
            raise SessionEndedException()

    def validate_waiting(self, session: LiveSession) -> None:
        self.validate_not_ended(session)
        if session.phase != Phase.WAITING:
            raise InvalidPhaseException()
