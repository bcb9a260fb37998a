"""Periodic expiry of stale sessions"""
import asyncio
import logging
from sqlalchemy.exc import SQLAlchemyError

from app.config import SWEEP_INTERVAL_SECONDS
from app.db.postgres import async_session
from app.sessions.service import SessionService

logger = logging.getLogger(__name__)


async def sweep_once(session_factory=async_session) -> int:
    """Run one expiry pass and return how many sessions were ended."""
    async with session_factory() as db:
        checked, canceled = await SessionService(db).expire_stale_sessions()
    if canceled:
        logger.info(f"Sweep checked {checked} sessions, ended {len(canceled)}")
    return len(canceled)


async def run_sweeper(interval: int = SWEEP_INTERVAL_SECONDS, session_factory=async_session):
    logger.info(f"Session sweeper started, interval {interval}s")
    while True:
        try:
            await sweep_once(session_factory)
        except SQLAlchemyError as e:
            logger.error(f"Sweep failed: {e}")
        await asyncio.sleep(interval)


def start_sweeper():
    logging.basicConfig(level=logging.INFO)
    try:
        asyncio.run(run_sweeper())
    except KeyboardInterrupt:
        logger.info("Session sweeper stopped")
