"""Review REST API endpoints"""
from uuid import UUID
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.postgres import get_db
from app.reviews.service import ReviewService
from app.reviews.schemas import CreateReviewRequest, CreateReviewResponse, ReviewResponse
from app.auth.middleware import JWTPayload, verify_token, check_permission


router = APIRouter(
    prefix="/reviews",
    tags=["reviews"],
)


@router.post("/create", response_model=CreateReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    request: CreateReviewRequest,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Review an ended session.

    Business rules:
    - Only the session's guest can review
    - One review per session
    - Rating: 1-5 stars

    Required permission: review:create (GUEST role)
    """
    check_permission(jwt_payload, "review:create")

    service = ReviewService(db)
    review, average, count = await service.create_review(
        session_id=request.session_id,
        guest_id=jwt_payload.user_id,
        rating=request.rating,
        comment=request.comment,
    )
    return CreateReviewResponse(
        review=ReviewResponse.model_validate(review),
        practitioner_rating=average,
        practitioner_review_count=count,
    )


@router.get("/{session_id}", response_model=List[ReviewResponse])
async def get_session_review(
    session_id: UUID,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Reviews left for a session (at most one).

    Required permission: review:read
    """
    check_permission(jwt_payload, "review:read")

    service = ReviewService(db)
    return await service.list_for_session(session_id, jwt_payload.user_id)
