"""Upload custom exceptions"""
from fastapi import HTTPException, status


class StorageUnavailableException(HTTPException):
    """Raised when the object store cannot sign an upload"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Object storage unavailable"
        )
