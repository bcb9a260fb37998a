"""Review service layer for business logic"""
import logging
from uuid import UUID
from typing import List, Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Phase, Review
from app.reviews.repository import ReviewRepository
from app.reviews.rating import summarize_ratings
from app.reviews.exceptions import (
    NotSessionGuestException,
    ReviewAlreadyExistsException,
    SessionNotEndedException,
)
from app.sessions.repository import SessionRepository
from app.sessions.exceptions import SessionNotFoundException
from app.sessions.validators import SessionValidator
from app.practitioners.repository import PractitionerRepository

logger = logging.getLogger(__name__)


class ReviewService:
    """Service layer for review business logic"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = ReviewRepository(db)
        self.session_repository = SessionRepository(db)
        self.practitioner_repository = PractitionerRepository(db)
        self.session_validator = SessionValidator()

    async def create_review(
        self,
        session_id: UUID,
        guest_id: UUID,
        rating: int,
        comment: Optional[str] = None,
    ) -> Tuple[Review, float, int]:
        """
        Review an ended session and refresh the practitioner's summary.

        Business rules:
        - Only the session's guest can review it
        - Only ended sessions can be reviewed
        - One review per session
        - The practitioner's rating is recomputed over all their reviews
          and written in the same transaction as the review
        """
        session = await self.session_repository.get_by_id(session_id)
        if not session:
            raise SessionNotFoundException(session_id)
        if session.guest_id != guest_id:
            raise NotSessionGuestException()
        if session.phase != Phase.ENDED:
            raise SessionNotEndedException()
        if await self.repository.get_by_session(session_id):
            raise ReviewAlreadyExistsException(session_id)

        practitioner_id = session.practitioner_id
        review = Review(
            session_id=session_id,
            guest_id=guest_id,
            practitioner_id=practitioner_id,
            rating=rating,
            comment=comment,
        )
        try:
            await self.repository.add(review)
            average, count = summarize_ratings(
                await self.repository.ratings_for_practitioner(practitioner_id)
            )
            await self.practitioner_repository.set_rating(practitioner_id, average, count)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ReviewAlreadyExistsException(session_id)

        logger.info(f"Review for session {session_id}: practitioner {practitioner_id} now {average} over {count}")
        return review, average, count

    async def list_for_session(self, session_id: UUID, user_id: UUID) -> List[Review]:
        """Reviews left for a session, visible to both participants"""
        session = await self.session_repository.get_by_id(session_id)
        if not session:
            raise SessionNotFoundException(session_id)
        self.session_validator.validate_participant(session, user_id)
        review = await self.repository.get_by_session(session_id)
        return [review] if review else []
