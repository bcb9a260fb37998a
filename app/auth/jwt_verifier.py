"""JWT Token Verification"""
import logging
import requests
from jose import jwt, JWTError
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class JWTVerifier:
    """Verifies Keycloak-issued access tokens against the realm JWKS"""

    def __init__(self, keycloak_url: str, realm: str, algorithm: str = "RS256", timeout: float = 10.0):
        self.algorithm = algorithm
        self.timeout = timeout
        self.jwks_url = f"{keycloak_url}/realms/{realm}/protocol/openid-connect/certs"
        self.issuer = f"{keycloak_url}/realms/{realm}"
        self._jwks_cache: Optional[Dict] = None

    def _get_jwks(self, refresh: bool = False) -> Dict:
        """Fetch JWKS from Keycloak (cached until a key rotation is seen)"""
        if self._jwks_cache is None or refresh:
            response = requests.get(self.jwks_url, timeout=self.timeout)
            response.raise_for_status()
            self._jwks_cache = response.json()
        return self._jwks_cache

    def _knows_key(self, token: str) -> bool:
        kid = jwt.get_unverified_header(token).get("kid")
        keys = self._get_jwks().get("keys", [])
        return kid is None or any(key.get("kid") == kid for key in keys)

    def verify_and_decode(self, token: str) -> Dict:
        """
        Verify JWT token signature and decode payload

        Raises:
            JWTError: Token is invalid or expired
            requests.RequestException: JWKS could not be fetched
        """
        if not self._knows_key(token):
            logger.info("Unknown signing key, refreshing JWKS")
            self._get_jwks(refresh=True)

        return jwt.decode(
            token,
            self._get_jwks(),
            algorithms=[self.algorithm],
            issuer=self.issuer,
            options={
                "verify_aud": False  # Keycloak doesn't always set audience
            },
        )

    @staticmethod
    def read_subject(token: str) -> str:
        """Read `sub` from a token just received from the token endpoint."""
        try:
            return jwt.get_unverified_claims(token)["sub"]
        except (JWTError, KeyError) as e:
            raise JWTError(f"Token has no subject: {e}")
