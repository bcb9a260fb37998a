"""Profile Repository Layer"""
from uuid import UUID
from typing import Iterable, Dict, Optional
from sqlalchemy import select
from app.db.models import Profile
from app.db.repository import BaseRepository


class ProfileRepository(BaseRepository):
    """Repository for profile database operations"""

    async def add(self, profile: Profile) -> Profile:
        """Stage a new profile in the current transaction"""
        self.db.add(profile)
        await self.db.flush()
        return profile

    async def get_by_id(self, user_id: UUID) -> Optional[Profile]:
        """Get profile by user ID"""
        stmt = select(Profile).where(Profile.id == user_id).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, user_ids: Iterable[UUID]) -> Dict[UUID, Profile]:
        """Get profiles keyed by ID"""
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(Profile).where(Profile.id.in_(ids)))
        return {profile.id: profile for profile in result.scalars().all()}

    async def update(self, profile: Profile) -> Profile:
        """Persist changes made to a loaded profile"""
        await self.db.commit()
        await self.db.refresh(profile)
        return profile
