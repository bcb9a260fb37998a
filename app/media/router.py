"""Media token endpoint"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.postgres import get_db
from app.media.schemas import MediaTokenResponse
from app.media.service import MediaService
from app.media.token_minter import AgoraTokenMinter, get_token_minter
from app.auth.middleware import JWTPayload, verify_token, check_permission

router = APIRouter(
    prefix="/agora",
    tags=["media"],
)


@router.get("/token", response_model=MediaTokenResponse)
async def get_media_token(
    channel: str = Query(..., min_length=1),
    uid: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    minter: AgoraTokenMinter = Depends(get_token_minter),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    RTC token for the caller on a live session's channel.

    Required permission: media:token (GUEST, PRACTITIONER roles)
    """
    check_permission(jwt_payload, "media:token")

    service = MediaService(db, minter)
    token, identity = await service.issue_token(channel, jwt_payload.user_id, uid)
    return MediaTokenResponse(token=token, app_id=minter.app_id, uid=identity)
