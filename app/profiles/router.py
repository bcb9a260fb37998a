from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.postgres import get_db
from app.profiles.service import ProfileService
from app.profiles.schemas import ProfileResponse, UpdateProfileRequest
from app.auth.middleware import JWTPayload, verify_token, check_permission

router = APIRouter(
    prefix="/profile",
    tags=["profile"],
)


@router.get("", response_model=ProfileResponse)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """Get the caller's profile."""
    check_permission(jwt_payload, "profile:read")

    service = ProfileService(db)
    return await service.get_profile(jwt_payload.user_id)


@router.put("", response_model=ProfileResponse)
async def update_profile(
    request: UpdateProfileRequest,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Update the caller's profile.

    Only fields present in the body are changed.
    Required permission: profile:update
    """
    check_permission(jwt_payload, "profile:update")

    service = ProfileService(db)
    return await service.update_profile(
        jwt_payload.user_id,
        request.model_dump(exclude_unset=True),
    )
