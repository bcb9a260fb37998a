"""JWT Payload Models"""
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

from app.db.models import Role


class JWTPayload(BaseModel):
    """Verified caller identity extracted from a Keycloak access token"""
    user_id: UUID = Field(..., alias="sub")
    email: Optional[str] = None
    roles: list[str] = []
    permissions: list[str] = []
    iat: Optional[datetime] = None
    exp: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def role(self) -> Optional[Role]:
        """Marketplace role carried as a realm role, if any"""
        for role in (Role.PRACTITIONER, Role.GUEST):
            if role.value in self.roles:
                return role
        return None
