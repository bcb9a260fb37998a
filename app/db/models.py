from enum import Enum
from uuid import uuid4
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    Uuid,
)
from app.db.base import Base
from app.utils.clock import utcnow


class Role(str, Enum):
    GUEST = "guest"
    PRACTITIONER = "practitioner"


class Phase(str, Enum):
    WAITING = "waiting"
    LIVE = "live"
    ENDED = "ended"


class Profile(Base):
    """
    Public profile of a guest or practitioner.
    The id is the identity provider's user id; id and role never change.
    """
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True)
    role = Column(String(20), nullable=False)  # guest | practitioner
    display_name = Column(String(255), nullable=False)
    country = Column(String(100), nullable=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(Text, nullable=True)
    gallery_urls = Column(JSON, nullable=False, default=list)
    video_url = Column(Text, nullable=True)
    specialties = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Practitioner(Base):
    """
    Presence and rating summary for a practitioner profile.
    is_online is practitioner-controlled; in_service is owned by the session engine.
    """
    __tablename__ = "practitioners"

    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    is_online = Column(Boolean, nullable=False, default=False)
    in_service = Column(Boolean, nullable=False, default=False)
    rating = Column(Numeric(2, 1, asdecimal=False), nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class LiveSession(Base):
    """Consultation session between one guest and one practitioner"""
    __tablename__ = "sessions"

    id = Column(Uuid, primary_key=True, default=uuid4)
    practitioner_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    guest_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    phase = Column(String(20), default=Phase.WAITING.value, nullable=False, index=True)  # waiting | live | ended
    live_seconds = Column(Integer, nullable=False)
    acknowledged_practitioner = Column(Boolean, nullable=False, default=False)
    ready_practitioner = Column(Boolean, nullable=False, default=False)
    ready_guest = Column(Boolean, nullable=False, default=False)
    agora_channel = Column(String(64), nullable=False, index=True)
    live_started_at = Column(DateTime, nullable=True)
    ended_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Review(Base):
    """Guest review of an ended session"""
    __tablename__ = "reviews"

    id = Column(Uuid, primary_key=True, default=uuid4)
    session_id = Column(Uuid, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    guest_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    practitioner_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)  # 1-5 stars
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
