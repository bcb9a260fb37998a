"""Practitioner Repository Layer"""
from uuid import UUID
from typing import List, Optional, Tuple
from sqlalchemy import select, update
from app.db.models import Practitioner, Profile
from app.db.repository import BaseRepository


class PractitionerRepository(BaseRepository):
    """Repository for practitioner presence and rating rows"""

    async def add(self, practitioner: Practitioner) -> Practitioner:
        """Stage a new practitioner row in the current transaction"""
        self.db.add(practitioner)
        await self.db.flush()
        return practitioner

    async def get_by_id(self, user_id: UUID) -> Optional[Practitioner]:
        """Get practitioner by user ID"""
        stmt = (
            select(Practitioner)
            .where(Practitioner.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_with_profile(self, user_id: UUID) -> Optional[Tuple[Practitioner, Profile]]:
        """Get practitioner joined with its profile"""
        stmt = (
            select(Practitioner, Profile)
            .join(Profile, Profile.id == Practitioner.user_id)
            .where(Practitioner.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        row = result.one_or_none()
        return (row[0], row[1]) if row else None

    async def list_with_profiles(self, online_only: bool = False) -> List[Tuple[Practitioner, Profile]]:
        """List practitioners joined with profiles, best rated first"""
        stmt = select(Practitioner, Profile).join(Profile, Profile.id == Practitioner.user_id)
        if online_only:
            stmt = stmt.where(Practitioner.is_online.is_(True))
        stmt = stmt.order_by(Practitioner.rating.desc(), Profile.display_name)
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return [(row[0], row[1]) for row in result.all()]

    async def set_online(self, user_id: UUID, is_online: bool) -> bool:
        """Set the practitioner-controlled online flag"""
        return await self._apply(
            update(Practitioner)
            .where(Practitioner.user_id == user_id)
            .values(is_online=is_online)
        )

    async def claim_for_service(self, user_id: UUID) -> bool:
        """
        Atomically mark an online, idle practitioner as in service.

        Returns False when the practitioner is missing, offline or already busy.
        """
        return await self._apply(
            update(Practitioner)
            .where(
                Practitioner.user_id == user_id,
                Practitioner.is_online.is_(True),
                Practitioner.in_service.is_(False),
            )
            .values(in_service=True)
        )

    async def release_from_service(self, user_id: UUID) -> bool:
        """Mark practitioner as available again"""
        return await self._apply(
            update(Practitioner)
            .where(Practitioner.user_id == user_id)
            .values(in_service=False)
        )

    async def set_rating(self, user_id: UUID, rating: float, review_count: int) -> bool:
        """Write back the aggregated review summary"""
        return await self._apply(
            update(Practitioner)
            .where(Practitioner.user_id == user_id)
            .values(rating=rating, review_count=review_count)
        )
