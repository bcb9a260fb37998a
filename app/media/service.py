"""Media access for live sessions"""
import logging
from uuid import UUID
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import LiveSession, Phase
from app.media.token_minter import AgoraTokenMinter
from app.media.exceptions import (
    ChannelNotFoundException,
    IdentityMismatchException,
    MediaNotConfiguredException,
    SessionNotLiveException,
)
from app.sessions.repository import SessionRepository
from app.sessions.validators import SessionValidator

logger = logging.getLogger(__name__)


class MediaService:
    """Issues channel tokens to the participants of live sessions"""

    def __init__(self, db: AsyncSession, minter: AgoraTokenMinter):
        self.db = db
        self.minter = minter
        self.session_repository = SessionRepository(db)
        self.validator = SessionValidator()

    async def issue_token(
        self,
        channel: str,
        user_id: UUID,
        uid: Optional[str] = None,
    ) -> Tuple[str, str]:
        """
        Mint a token for the caller on a session's channel.

        The participant identity is ``guest_<id>`` or ``practitioner_<id>`` by the
        caller's side in the session, so both sides always join the same channel
        under distinct accounts.

        Returns:
            Tuple of (token, identity)
        """
        if not self.minter.configured:
            raise MediaNotConfiguredException()

        sessions = await self.session_repository.get_by_channel(channel)
        if not sessions:
            raise ChannelNotFoundException(channel)
        session = self._pick_session(sessions, user_id)
        side = self.validator.validate_participant(session, user_id)
        if session.phase != Phase.LIVE:
            raise SessionNotLiveException()

        identity = f"{side.value}_{user_id}"
        if uid is not None and uid != identity:
            raise IdentityMismatchException()

        token = self.minter.mint(session.agora_channel, identity)
        logger.info(f"Issued media token for {identity} on {channel}")
        return token, identity

    @staticmethod
    def _pick_session(sessions: List[LiveSession], user_id: UUID) -> LiveSession:
        """The caller's own session on the channel, live ones first; newest row when the caller has none"""
        own = [s for s in sessions if user_id in (s.guest_id, s.practitioner_id)]
        if not own:
            return sessions[0]
        return next((s for s in own if s.phase == Phase.LIVE), own[0])
