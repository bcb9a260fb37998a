"""Shared repository base helpers."""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Update


class BaseRepository:
    """Base repository with common DB helpers."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _apply(self, stmt: Update) -> bool:
        """Execute a conditional UPDATE; True when at least one row matched."""
        result = await self.db.execute(
            stmt.execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
