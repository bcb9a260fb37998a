"""Review repository for database operations"""
from uuid import UUID
from typing import List, Optional
from sqlalchemy import select
from app.db.models import Review
from app.db.repository import BaseRepository


class ReviewRepository(BaseRepository):
    """Repository for review database operations"""

    async def add(self, review: Review) -> Review:
        """Stage a new review in the current transaction"""
        self.db.add(review)
        await self.db.flush()
        return review

    async def get_by_session(self, session_id: UUID) -> Optional[Review]:
        """Get the review left for a session"""
        stmt = select(Review).where(Review.session_id == session_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def ratings_for_practitioner(self, practitioner_id: UUID) -> List[int]:
        """Every star rating a practitioner has received"""
        stmt = select(Review.rating).where(Review.practitioner_id == practitioner_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
