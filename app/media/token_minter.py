"""Agora RTC token minting"""
import time
from typing import Optional

from agora_token_builder import RtcTokenBuilder

from app.config import AGORA_APP_CERTIFICATE, AGORA_APP_ID, AGORA_TOKEN_TTL_SECONDS

# Both sides publish audio and video
PUBLISHER_ROLE = 1


class AgoraTokenMinter:

    def __init__(
        self,
        app_id: Optional[str] = AGORA_APP_ID,
        app_certificate: Optional[str] = AGORA_APP_CERTIFICATE,
        ttl_seconds: int = AGORA_TOKEN_TTL_SECONDS,
    ):
        self.app_id = app_id
        self.app_certificate = app_certificate
        self.ttl_seconds = ttl_seconds

    @property
    def configured(self) -> bool:
        return bool(self.app_id and self.app_certificate)

    def mint(self, channel: str, account: str) -> str:
        """Publisher token for a string account on one channel, valid for ttl_seconds."""
        expires_at = int(time.time()) + self.ttl_seconds
        return RtcTokenBuilder.buildTokenWithAccount(
            self.app_id,
            self.app_certificate,
            channel,
            account,
            PUBLISHER_ROLE,
            expires_at,
        )


token_minter = AgoraTokenMinter()


def get_token_minter() -> AgoraTokenMinter:
    return token_minter
