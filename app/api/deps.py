from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from typing import List, Optional

from ..core.security import (
    security, verify_token, AuthenticationError,
    AuthorizationError, UserRole, TokenPayload, Identity
)

async def get_current_user_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    if credentials is None:
        raise AuthenticationError("No token provided")

    # Verify token
    token_payload = verify_token(credentials.credentials)
    if not token_payload:
        raise AuthenticationError("Invalid or expired token")

    # Check if token is access token
    if token_payload.token_type != "access":
        raise AuthenticationError("Invalid token type")

    return token_payload

async def get_current_identity(
    token_payload: TokenPayload = Depends(get_current_user_token)
) -> Identity:
    """Authenticated caller id and role, taken from the token claims."""
    if not token_payload.sub:
        raise AuthenticationError("Invalid token payload")

    try:
        role = UserRole(token_payload.role)
    except ValueError:
        raise AuthenticationError("Invalid token role")

    return Identity(user_id=token_payload.sub, role=role)

# Role-based access control dependencies
def require_role(allowed_roles: List[UserRole]):
    """Create a dependency that requires specific user roles."""
    async def role_checker(
        identity: Identity = Depends(get_current_identity)
    ) -> Identity:
        if identity.role not in allowed_roles:
            raise AuthorizationError("Access denied: insufficient role")
        return identity

    return role_checker

# Specific role dependencies
async def get_doctor_identity(
    identity: Identity = Depends(require_role([UserRole.DOCTOR]))
) -> Identity:
    """Require doctor role."""
    return identity

async def get_patient_identity(
    identity: Identity = Depends(require_role([UserRole.PATIENT]))
) -> Identity:
    """Require patient role."""
    return identity
