"""Presence custom exceptions"""
from uuid import UUID
from fastapi import HTTPException, status


class PractitionerNotFoundException(HTTPException):
    """Raised when no practitioner record exists for an id"""
    def __init__(self, practitioner_id: UUID = None):
        detail = "Practitioner not found"
        if practitioner_id:
            detail = f"Practitioner {practitioner_id} not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
