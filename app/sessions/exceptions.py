"""Custom exceptions for consultation sessions"""
from uuid import UUID
from fastapi import HTTPException, status


class SessionNotFoundException(HTTPException):
    """Raised when a session is not found"""
    def __init__(self, session_id: UUID = None):
        detail = "Session not found"
        if session_id:
            detail = f"Session {session_id} not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class NotParticipantException(HTTPException):
    """Raised when the caller is neither the guest nor the practitioner"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a session participant"
        )


class PractitionerOnlyException(HTTPException):
    """Raised when someone other than the session's practitioner responds to it"""
    def __init__(self, action: str):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only the practitioner can {action} the session"
        )


class GuestOnlyException(HTTPException):
    """Raised when a non-guest tries to start a session"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only guests can start sessions"
        )


class PractitionerRoleRequiredException(HTTPException):
    """Raised when a non-practitioner lists practitioner sessions"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only practitioners can access this endpoint"
        )


class InvalidPhaseException(HTTPException):
    """Raised when an operation is not legal in the session's phase"""
    def __init__(self, detail: str = "Session is not in waiting phase"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class SessionEndedException(InvalidPhaseException):
    """Raised when mutating a session that already ended"""
    def __init__(self):
        super().__init__("Session has already ended")


class AcknowledgeFirstException(InvalidPhaseException):
    """Raised when the practitioner readies up before acknowledging"""
    def __init__(self):
        super().__init__("Please acknowledge the session request first")


class PractitionerUnavailableException(InvalidPhaseException):
    """Raised when starting a session with an offline practitioner"""
    def __init__(self):
        super().__init__("Practitioner is not available")


class PractitionerBusyException(InvalidPhaseException):
    """Raised when the practitioner is already in another session"""
    def __init__(self):
        super().__init__("Practitioner is already in a session")
