from uuid import UUID
from datetime import datetime
from typing import List, Optional
from pydantic import Field

from app.db.models import Phase, Role
from app.profiles.schemas import ProfileResponse
from app.utils.casing import CamelModel


class StartSessionRequest(CamelModel):
    """Guest request for a live consultation"""
    practitioner_id: UUID
    live_seconds: int = Field(..., gt=0, description="Requested call length in seconds")


class SessionActionRequest(CamelModel):
    """Body shared by accept / acknowledge / reject / end"""
    session_id: UUID


class MarkReadyRequest(CamelModel):
    """Ready-up for one side of the session"""
    session_id: UUID
    who: Role


class StartSessionResponse(CamelModel):
    session_id: UUID


class SessionResponse(CamelModel):
    """Session response"""
    id: UUID
    practitioner_id: UUID
    guest_id: UUID
    phase: Phase
    live_seconds: int
    acknowledged_practitioner: bool
    ready_practitioner: bool
    ready_guest: bool
    agora_channel: str
    live_started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class AcknowledgeResponse(CamelModel):
    success: bool
    message: str
    session: SessionResponse


class SessionDetailResponse(SessionResponse):
    """Session with both participants' profiles"""
    guest: Optional[ProfileResponse] = None
    practitioner: Optional[ProfileResponse] = None


class PractitionerSessionItem(SessionDetailResponse):
    """Session as shown on the practitioner dashboard"""
    practitioner_rating: float
    practitioner_review_count: int


class ExpiredSessionItem(CamelModel):
    session_id: UUID
    practitioner_id: UUID
    guest_id: UUID
    phase: Phase  # phase the session was in when it expired


class CheckTimeoutsResponse(CamelModel):
    checked: int
    canceled: int
    sessions: List[ExpiredSessionItem]
