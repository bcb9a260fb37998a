"""Keycloak account operations: signup, login, logout"""
import logging
from typing import Dict, Optional

import requests

from app.config import (
    KEYCLOAK_URL,
    KEYCLOAK_REALM,
    KEYCLOAK_CLIENT_ID,
    KEYCLOAK_CLIENT_SECRET,
)
from app.auth.exceptions import (
    AccountAlreadyExistsException,
    IdentityProviderException,
    InvalidCredentialsException,
)

logger = logging.getLogger(__name__)


class KeycloakIdentityGateway:
    """Thin client over the Keycloak token and admin REST endpoints"""

    def __init__(
        self,
        keycloak_url: str,
        realm: str,
        client_id: Optional[str],
        client_secret: Optional[str],
        timeout: float = 10.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        oidc = f"{keycloak_url}/realms/{realm}/protocol/openid-connect"
        self.token_url = f"{oidc}/token"
        self.logout_url = f"{oidc}/logout"
        self.admin_url = f"{keycloak_url}/admin/realms/{realm}"

    def _post(self, url: str, **kwargs) -> requests.Response:
        try:
            return requests.post(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Keycloak request to {url} failed: {e}")
            raise IdentityProviderException()

    def _client_form(self) -> Dict[str, str]:
        form = {"client_id": self.client_id}
        if self.client_secret:
            form["client_secret"] = self.client_secret
        return form

    def _admin_headers(self) -> Dict[str, str]:
        response = self._post(
            self.token_url,
            data={"grant_type": "client_credentials", **self._client_form()},
        )
        if response.status_code != 200:
            logger.error(f"Admin token request rejected: {response.status_code}")
            raise IdentityProviderException()
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def login(self, email: str, password: str) -> Dict:
        """
        Exchange credentials for tokens (password grant).

        Returns the raw token response: access_token, refresh_token, expires_in...
        """
        response = self._post(
            self.token_url,
            data={
                "grant_type": "password",
                "username": email,
                "password": password,
                "scope": "openid",
                **self._client_form(),
            },
        )
        if response.status_code in (400, 401):
            raise InvalidCredentialsException()
        if response.status_code != 200:
            raise IdentityProviderException()
        return response.json()

    def register(self, email: str, password: str, full_name: str, role: str) -> None:
        """Create an enabled user with a permanent password and a realm role."""
        headers = self._admin_headers()
        first_name, _, last_name = full_name.partition(" ")
        response = self._post(
            f"{self.admin_url}/users",
            headers=headers,
            json={
                "username": email,
                "email": email,
                "firstName": first_name,
                "lastName": last_name,
                "enabled": True,
                "emailVerified": True,
                "credentials": [{"type": "password", "value": password, "temporary": False}],
            },
        )
        if response.status_code == 409:
            raise AccountAlreadyExistsException(email)
        if response.status_code != 201:
            logger.error(f"User creation rejected: {response.status_code} {response.text}")
            raise IdentityProviderException()

        user_id = response.headers["Location"].rstrip("/").rsplit("/", 1)[-1]
        self._assign_realm_role(headers, user_id, role)
        logger.info(f"Registered {role} account {user_id}")

    def _assign_realm_role(self, headers: Dict[str, str], user_id: str, role: str) -> None:
        try:
            role_response = requests.get(
                f"{self.admin_url}/roles/{role}", headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Role lookup failed: {e}")
            raise IdentityProviderException()
        if role_response.status_code != 200:
            raise IdentityProviderException(f"Realm role '{role}' is not configured")

        response = self._post(
            f"{self.admin_url}/users/{user_id}/role-mappings/realm",
            headers=headers,
            json=[role_response.json()],
        )
        if response.status_code not in (200, 204):
            raise IdentityProviderException()

    def logout(self, refresh_token: str) -> None:
        """Revoke the refresh token and end the Keycloak session."""
        response = self._post(
            self.logout_url,
            data={"refresh_token": refresh_token, **self._client_form()},
        )
        if response.status_code not in (200, 204):
            raise InvalidCredentialsException("Invalid refresh token")


identity_gateway = KeycloakIdentityGateway(
    keycloak_url=KEYCLOAK_URL,
    realm=KEYCLOAK_REALM,
    client_id=KEYCLOAK_CLIENT_ID,
    client_secret=KEYCLOAK_CLIENT_SECRET,
)


def get_identity_gateway() -> KeycloakIdentityGateway:
    """Dependency returning the configured gateway"""
    return identity_gateway
