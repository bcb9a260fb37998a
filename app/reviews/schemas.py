"""Review Pydantic schemas"""
from uuid import UUID
from datetime import datetime
from typing import Optional
from pydantic import Field

from app.utils.casing import CamelModel


class CreateReviewRequest(CamelModel):
    """Request to review an ended session"""
    session_id: UUID
    rating: int = Field(..., ge=1, le=5, description="Star rating 1-5")
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewResponse(CamelModel):
    """Review response"""
    id: UUID
    session_id: UUID
    guest_id: UUID
    practitioner_id: UUID
    rating: int
    comment: Optional[str] = None
    created_at: datetime


class CreateReviewResponse(CamelModel):
    """Created review plus the practitioner's refreshed summary"""
    review: ReviewResponse
    practitioner_rating: float
    practitioner_review_count: int
