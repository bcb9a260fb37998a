"""Identity custom exceptions"""
from fastapi import HTTPException, status


class InvalidCredentialsException(HTTPException):
    """Raised when the identity provider rejects a login"""
    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class AccountAlreadyExistsException(HTTPException):
    """Raised when signing up with an email that is already registered"""
    def __init__(self, email: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"An account already exists for {email}"
        )


class IdentityProviderException(HTTPException):
    """Raised when Keycloak is unreachable or answers unexpectedly"""
    def __init__(self, detail: str = "Identity provider unavailable"):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


class RoleMismatchException(HTTPException):
    """Raised when a profile is requested for a role the account does not hold"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Requested role does not match the account role"
        )
