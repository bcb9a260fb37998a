from uuid import UUID
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models import Practitioner, Profile
from app.db.postgres import get_db
from app.practitioners.service import PresenceService
from app.practitioners.schemas import (
    PractitionerResponse,
    PresenceStatusResponse,
    ToggleStatusRequest,
)
from app.profiles.schemas import ProfileResponse
from app.auth.middleware import JWTPayload, verify_token, check_permission

router = APIRouter(
    prefix="/practitioners",
    tags=["practitioners"],
)


def to_response(practitioner: Practitioner, profile: Profile) -> PractitionerResponse:
    """Merge presence row and profile"""
    return PractitionerResponse(
        user_id=practitioner.user_id,
        is_online=practitioner.is_online,
        in_service=practitioner.in_service,
        rating=practitioner.rating,
        review_count=practitioner.review_count,
        updated_at=practitioner.updated_at,
        profile=ProfileResponse.model_validate(profile),
    )


@router.get("", response_model=List[PractitionerResponse])
async def list_practitioners(
    online: bool = Query(False, description="Only practitioners currently online"),
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """List practitioners with their profiles."""
    check_permission(jwt_payload, "practitioner:read")

    service = PresenceService(db)
    rows = await service.list_practitioners(online_only=online)
    return [to_response(practitioner, profile) for practitioner, profile in rows]


@router.get("/online", response_model=List[PractitionerResponse])
async def list_online_practitioners(
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """List practitioners that are online right now."""
    check_permission(jwt_payload, "practitioner:read")

    service = PresenceService(db)
    rows = await service.list_practitioners(online_only=True)
    return [to_response(practitioner, profile) for practitioner, profile in rows]


@router.get("/status", response_model=PresenceStatusResponse)
async def get_own_status(
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """Presence of the calling practitioner."""
    check_permission(jwt_payload, "presence:update")

    service = PresenceService(db)
    return await service.get_status(jwt_payload.user_id)


@router.put("/toggle-status", response_model=PresenceStatusResponse)
async def toggle_status(
    request: ToggleStatusRequest,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Go online or offline.

    Only isOnline is accepted; inService follows the practitioner's sessions.
    Required permission: presence:update (PRACTITIONER role)
    """
    check_permission(jwt_payload, "presence:update")

    service = PresenceService(db)
    return await service.set_online(jwt_payload.user_id, request.is_online)


@router.get("/{practitioner_id}", response_model=PractitionerResponse)
async def get_practitioner(
    practitioner_id: UUID,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """Practitioner detail with profile."""
    check_permission(jwt_payload, "practitioner:read")

    service = PresenceService(db)
    practitioner, profile = await service.get_practitioner(practitioner_id)
    return to_response(practitioner, profile)
