from uuid import UUID
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models import LiveSession, Profile
from app.db.postgres import get_db
from app.sessions.service import SessionService
from app.sessions.schemas import (
    AcknowledgeResponse,
    CheckTimeoutsResponse,
    ExpiredSessionItem,
    MarkReadyRequest,
    PractitionerSessionItem,
    SessionActionRequest,
    SessionDetailResponse,
    SessionResponse,
    StartSessionRequest,
    StartSessionResponse,
)
from app.profiles.schemas import ProfileResponse
from app.auth.middleware import JWTPayload, verify_token, check_permission

router = APIRouter(
    prefix="/sessions",
    tags=["sessions"],
)


def _profile(profiles: Dict[UUID, Profile], user_id: UUID) -> Optional[ProfileResponse]:
    profile = profiles.get(user_id)
    return ProfileResponse.model_validate(profile) if profile else None


def to_detail(session: LiveSession, profiles: Dict[UUID, Profile]) -> SessionDetailResponse:
    """Session joined with participant profiles"""
    return SessionDetailResponse(
        **SessionResponse.model_validate(session).model_dump(),
        guest=_profile(profiles, session.guest_id),
        practitioner=_profile(profiles, session.practitioner_id),
    )


@router.post("/start", response_model=StartSessionResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    request: StartSessionRequest,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Request a live session with a practitioner.

    Workflow:
    1. Validates the caller is a guest
    2. Claims the practitioner if online and not in service
    3. Creates the session in waiting phase

    Required permission: session:start (GUEST role)
    """
    check_permission(jwt_payload, "session:start")

    service = SessionService(db)
    session = await service.start_session(
        guest_id=jwt_payload.user_id,
        practitioner_id=request.practitioner_id,
        live_seconds=request.live_seconds,
    )
    return StartSessionResponse(session_id=session.id)


@router.post("/acknowledge", response_model=AcknowledgeResponse)
async def acknowledge_session(
    request: SessionActionRequest,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Practitioner acknowledges a waiting request.

    Required permission: session:respond (PRACTITIONER role)
    """
    check_permission(jwt_payload, "session:respond")

    service = SessionService(db)
    session = await service.acknowledge(request.session_id, jwt_payload.user_id)
    return AcknowledgeResponse(
        success=True,
        message="Session acknowledged. Guest has been notified.",
        session=SessionResponse.model_validate(session),
    )


@router.post("/accept", response_model=SessionResponse)
async def accept_session(
    request: SessionActionRequest,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Practitioner acknowledges and readies up in one step.

    Required permission: session:respond (PRACTITIONER role)
    """
    check_permission(jwt_payload, "session:respond")

    service = SessionService(db)
    return await service.accept(request.session_id, jwt_payload.user_id)


@router.post("/ready", response_model=SessionResponse)
async def mark_ready(
    request: MarkReadyRequest,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Mark one side ready. The session goes live when both sides are ready.

    Required permission: session:participate (GUEST, PRACTITIONER roles)
    """
    check_permission(jwt_payload, "session:participate")

    service = SessionService(db)
    return await service.mark_ready(request.session_id, jwt_payload.user_id, request.who)


@router.post("/reject", response_model=SessionResponse)
async def reject_session(
    request: SessionActionRequest,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Practitioner declines a waiting request.

    Required permission: session:respond (PRACTITIONER role)
    """
    check_permission(jwt_payload, "session:respond")

    service = SessionService(db)
    return await service.reject(request.session_id, jwt_payload.user_id)


@router.post("/end", response_model=SessionResponse)
async def end_session(
    request: SessionActionRequest,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    End a session from any phase. Repeating the call is harmless.

    Required permission: session:participate (GUEST, PRACTITIONER roles)
    """
    check_permission(jwt_payload, "session:participate")

    service = SessionService(db)
    return await service.end_session(request.session_id, jwt_payload.user_id)


@router.post("/check-timeouts", response_model=CheckTimeoutsResponse)
async def check_timeouts(
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    End sessions whose waiting room or booked call length ran out.

    Required permission: session:sweep (ADMIN role)
    """
    check_permission(jwt_payload, "session:sweep")

    service = SessionService(db)
    checked, canceled = await service.expire_stale_sessions()
    return CheckTimeoutsResponse(
        checked=checked,
        canceled=len(canceled),
        sessions=[
            ExpiredSessionItem(
                session_id=session.id,
                practitioner_id=session.practitioner_id,
                guest_id=session.guest_id,
                phase=session.phase,
            )
            for session in canceled
        ],
    )


@router.get("/practitioner", response_model=List[PractitionerSessionItem])
async def list_practitioner_sessions(
    practitioner_id: Optional[UUID] = Query(None, alias="practitionerId"),
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Waiting and live sessions of the calling practitioner.

    Required permission: session:respond (PRACTITIONER role)
    """
    check_permission(jwt_payload, "session:respond")

    service = SessionService(db)
    sessions, profiles, practitioner = await service.list_practitioner_sessions(
        jwt_payload.user_id, practitioner_id
    )
    return [
        PractitionerSessionItem(
            **to_detail(session, profiles).model_dump(),
            practitioner_rating=practitioner.rating,
            practitioner_review_count=practitioner.review_count,
        )
        for session in sessions
    ]


@router.get("/{session_id}", response_model=SessionDetailResponse)
async def get_session(
    session_id: UUID,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Session detail for one of its participants.

    Required permission: session:read
    """
    check_permission(jwt_payload, "session:read")

    service = SessionService(db)
    session, profiles = await service.get_session_detail(session_id, jwt_payload.user_id)
    return to_detail(session, profiles)
