"""Authentication Middleware"""
import logging
import requests
from jose import JWTError
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer

from app.config import KEYCLOAK_URL, KEYCLOAK_REALM, JWT_ALGORITHM
from app.auth.models import JWTPayload
from app.auth.jwt_verifier import JWTVerifier
from app.auth.permissions_manager import PermissionsManager

logger = logging.getLogger(__name__)

# Initialize components
security = HTTPBearer()
jwt_verifier = JWTVerifier(
    keycloak_url=KEYCLOAK_URL,
    realm=KEYCLOAK_REALM,
    algorithm=JWT_ALGORITHM,
)
permissions_manager = PermissionsManager()


def build_payload(claims: dict) -> JWTPayload:
    """Map decoded token claims to a JWTPayload with derived permissions."""
    roles = claims.get("realm_access", {}).get("roles", [])
    return JWTPayload(
        sub=claims["sub"],
        email=claims.get("email"),
        roles=roles,
        permissions=permissions_manager.get_permissions_for_roles(roles),
        iat=claims.get("iat"),
        exp=claims.get("exp"),
    )


async def verify_token(credentials = Depends(security)) -> JWTPayload:
    """
    Verify JWT token from Keycloak and extract payload.

    Expected JWT claims:
    - sub: user_id
    - email: user email (optional)
    - realm_access.roles: list of role names (guest / practitioner / admin)
    """
    token = credentials.credentials

    try:
        payload = jwt_verifier.verify_and_decode(token)
        if "sub" not in payload:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token: missing subject"
            )
        return build_payload(payload)

    except HTTPException:
        raise
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}"
        )
    except requests.RequestException as e:
        logger.error(f"Could not fetch signing keys: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Identity provider unavailable"
        )


def check_permission(jwt_payload: JWTPayload, required_permission: str):
    """
    Check if user has required permission.

    Args:
        jwt_payload: JWT payload containing user permissions
        required_permission: Permission string to check

    Raises:
        HTTPException: If user lacks required permission
    """
    if required_permission not in jwt_payload.permissions:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Missing required permission: {required_permission}"
        )
