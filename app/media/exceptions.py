"""Media token custom exceptions"""
from fastapi import HTTPException, status


class MediaNotConfiguredException(HTTPException):
    """Raised when Agora credentials are missing"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Agora credentials not configured"
        )


class ChannelNotFoundException(HTTPException):
    """Raised when no session owns the requested channel"""
    def __init__(self, channel: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No session for channel {channel}"
        )


class IdentityMismatchException(HTTPException):
    """Raised when the requested uid is not the caller's own identity"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="uid does not match the caller"
        )


class SessionNotLiveException(HTTPException):
    """Raised when requesting media access to a session that is not live"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="Session is not live"
        )
