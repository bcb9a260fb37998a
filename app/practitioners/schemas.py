from uuid import UUID
from datetime import datetime
from typing import Optional

from app.profiles.schemas import ProfileResponse
from app.utils.casing import CamelModel


class PresenceStatusResponse(CamelModel):
    """Practitioner presence and rating summary"""
    user_id: UUID
    is_online: bool
    in_service: bool
    rating: float
    review_count: int
    updated_at: Optional[datetime] = None


class PractitionerResponse(PresenceStatusResponse):
    """Practitioner with public profile"""
    profile: ProfileResponse


class ToggleStatusRequest(CamelModel):
    """Practitioner self-toggle; in-service state is not settable here"""
    is_online: bool
