"""Review custom exceptions"""
from uuid import UUID
from fastapi import HTTPException, status


class ReviewAlreadyExistsException(HTTPException):
    """Raised when a review already exists for a session"""
    def __init__(self, session_id: UUID):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Review already exists for session {session_id}"
        )


class NotSessionGuestException(HTTPException):
    """Raised when someone other than the session's guest reviews it"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the session's guest can review it"
        )


class SessionNotEndedException(HTTPException):
    """Raised when reviewing a session that has not ended"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="Can only review completed sessions"
        )
