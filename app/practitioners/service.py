import logging
from uuid import UUID
from typing import List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Practitioner, Profile
from app.practitioners.exceptions import PractitionerNotFoundException
from app.practitioners.repository import PractitionerRepository

logger = logging.getLogger(__name__)


class PresenceService:
    """Reads and updates practitioner availability"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = PractitionerRepository(db)

    async def get_status(self, practitioner_id: UUID) -> Practitioner:
        practitioner = await self.repository.get_by_id(practitioner_id)
        if not practitioner:
            raise PractitionerNotFoundException(practitioner_id)
        return practitioner

    async def set_online(self, practitioner_id: UUID, is_online: bool) -> Practitioner:
        """
        Toggle the practitioner's own online flag.

        in_service is left to the session engine, so it cannot drift from the
        practitioner's active session.
        """
        if not await self.repository.set_online(practitioner_id, is_online):
            await self.db.rollback()
            raise PractitionerNotFoundException(practitioner_id)
        await self.db.commit()

        logger.info(f"Practitioner {practitioner_id} is now {'online' if is_online else 'offline'}")
        return await self.get_status(practitioner_id)

    async def get_practitioner(self, practitioner_id: UUID) -> Tuple[Practitioner, Profile]:
        row = await self.repository.get_with_profile(practitioner_id)
        if not row:
            raise PractitionerNotFoundException(practitioner_id)
        return row

    async def list_practitioners(self, online_only: bool = False) -> List[Tuple[Practitioner, Profile]]:
        return await self.repository.list_with_profiles(online_only=online_only)
