from uuid import UUID
from datetime import datetime
from typing import List, Optional
from pydantic import Field, field_validator

from app.db.models import Role
from app.utils.casing import CamelModel


class ProfileResponse(CamelModel):
    """Profile response"""
    id: UUID
    role: Role
    display_name: str
    country: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    gallery_urls: List[str] = []
    video_url: Optional[str] = None
    specialties: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UpdateProfileRequest(CamelModel):
    """Partial profile update; id and role are not writable"""
    display_name: Optional[str] = Field(None, min_length=1, max_length=255)
    country: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    gallery_urls: Optional[List[str]] = None
    video_url: Optional[str] = None
    specialties: Optional[List[str]] = None

    @field_validator("specialties")
    @classmethod
    def dedupe_specialties(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        return list(dict.fromkeys(item.strip() for item in value if item.strip()))
