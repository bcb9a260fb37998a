from uuid import UUID
from typing import Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Practitioner, Profile, Role
from app.profiles.exceptions import ProfileAlreadyExistsException, ProfileNotFoundException
from app.profiles.repository import ProfileRepository
from app.practitioners.repository import PractitionerRepository

# Columns that cannot be cleared with an explicit null
REQUIRED_FIELDS = {"display_name", "gallery_urls", "specialties"}


class ProfileService:
    """Service layer for profile business logic"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = ProfileRepository(db)
        self.practitioner_repository = PractitionerRepository(db)

    async def create_account_records(
        self,
        user_id: UUID,
        role: Role,
        display_name: str,
    ) -> Profile:
        """
        Create the profile for a new account, plus the presence record for practitioners.

        Both rows are committed together.
        """
        if await self.repository.get_by_id(user_id):
            raise ProfileAlreadyExistsException()

        profile = Profile(
            id=user_id,
            role=role.value,
            display_name=display_name,
            gallery_urls=[],
            specialties=[],
        )
        try:
            await self.repository.add(profile)
            if role == Role.PRACTITIONER:
                await self.practitioner_repository.add(Practitioner(user_id=user_id))
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ProfileAlreadyExistsException()

        await self.db.refresh(profile)
        return profile

    async def get_profile(self, user_id: UUID) -> Profile:
        profile = await self.repository.get_by_id(user_id)
        if not profile:
            raise ProfileNotFoundException(user_id)
        return profile

    async def get_account(self, user_id: UUID) -> Tuple[Profile, Optional[Practitioner]]:
        """Profile and, for practitioners, the presence record"""
        profile = await self.get_profile(user_id)
        practitioner = None
        if profile.role == Role.PRACTITIONER:
            practitioner = await self.practitioner_repository.get_by_id(user_id)
        return profile, practitioner

    async def update_profile(self, user_id: UUID, changes: dict) -> Profile:
        profile = await self.get_profile(user_id)
        for field, value in changes.items():
            if value is None and field in REQUIRED_FIELDS:
                continue
            setattr(profile, field, value)
        return await self.repository.update(profile)
