"""Profile custom exceptions"""
from uuid import UUID
from fastapi import HTTPException, status


class ProfileNotFoundException(HTTPException):
    """Raised when a user has no profile"""
    def __init__(self, user_id: UUID = None):
        detail = "Profile not found"
        if user_id:
            detail = f"Profile {user_id} not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ProfileAlreadyExistsException(HTTPException):
    """Raised when creating a second profile for the same user"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="Profile already exists"
        )
