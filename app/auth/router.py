"""Account endpoints backed by Keycloak"""
import logging
from uuid import UUID
from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.postgres import get_db
from app.auth.exceptions import IdentityProviderException, InvalidCredentialsException, RoleMismatchException
from app.auth.identity import KeycloakIdentityGateway, get_identity_gateway
from app.auth.jwt_verifier import JWTVerifier
from app.auth.middleware import JWTPayload, verify_token, check_permission
from app.auth.schemas import (
    AccountUser,
    CurrentUserResponse,
    LoginRequest,
    LogoutRequest,
    LogoutResponse,
    RoleInitRequest,
    SessionTokensResponse,
    SignupRequest,
)
from app.profiles.exceptions import ProfileNotFoundException
from app.profiles.schemas import ProfileResponse
from app.profiles.service import ProfileService
from app.practitioners.schemas import PresenceStatusResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)

NEW_USER_NAME = "New User"


def _subject(tokens: dict) -> UUID:
    try:
        return UUID(JWTVerifier.read_subject(tokens["access_token"]))
    except (JWTError, KeyError, ValueError) as e:
        logger.error(f"Unusable token response from identity provider: {e}")
        raise IdentityProviderException()


@router.post("/signup", response_model=SessionTokensResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignupRequest,
    db: AsyncSession = Depends(get_db),
    gateway: KeycloakIdentityGateway = Depends(get_identity_gateway),
):
    """
    Create an account and sign in.

    Workflow:
    1. Creates the Keycloak user with the requested realm role
    2. Signs in with the new credentials
    3. Creates the profile (and presence record for practitioners)
    """
    await run_in_threadpool(
        gateway.register, request.email, request.password, request.full_name, request.role.value
    )
    tokens = await run_in_threadpool(gateway.login, request.email, request.password)
    user_id = _subject(tokens)

    service = ProfileService(db)
    profile = await service.create_account_records(user_id, request.role, request.full_name)

    return SessionTokensResponse(
        user=AccountUser(id=profile.id, email=request.email),
        access_token=tokens["access_token"],
        refresh_token=tokens.get("refresh_token"),
        profile=ProfileResponse.model_validate(profile),
    )


@router.post("/login", response_model=SessionTokensResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    gateway: KeycloakIdentityGateway = Depends(get_identity_gateway),
):
    """Sign in; the account must already have a profile."""
    tokens = await run_in_threadpool(gateway.login, request.email, request.password)
    user_id = _subject(tokens)

    service = ProfileService(db)
    try:
        profile = await service.get_profile(user_id)
    except ProfileNotFoundException:
        raise InvalidCredentialsException("Account not found. Please sign up first.")

    return SessionTokensResponse(
        user=AccountUser(id=profile.id, email=request.email),
        access_token=tokens["access_token"],
        refresh_token=tokens.get("refresh_token"),
        profile=ProfileResponse.model_validate(profile),
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    request: LogoutRequest,
    gateway: KeycloakIdentityGateway = Depends(get_identity_gateway),
):
    """Revoke the refresh token."""
    await run_in_threadpool(gateway.logout, request.refresh_token)
    return LogoutResponse(success=True)


@router.get("/user", response_model=CurrentUserResponse)
async def current_user(
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """The caller's profile and, for practitioners, presence."""
    check_permission(jwt_payload, "profile:read")

    service = ProfileService(db)
    profile, practitioner = await service.get_account(jwt_payload.user_id)
    return CurrentUserResponse(
        id=profile.id,
        profile=ProfileResponse.model_validate(profile),
        practitioner=PresenceStatusResponse.model_validate(practitioner) if practitioner else None,
    )


@router.post("/role-init", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def role_init(
    request: RoleInitRequest,
    db: AsyncSession = Depends(get_db),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Create the profile for an authenticated user that has none yet.

    Required permission: profile:create
    """
    check_permission(jwt_payload, "profile:create")
    if jwt_payload.role is not None and jwt_payload.role != request.role:
        raise RoleMismatchException()

    service = ProfileService(db)
    return await service.create_account_records(jwt_payload.user_id, request.role, NEW_USER_NAME)
