from typing import List

from fastapi import Depends, HTTPException, status, Request
from jose import jwt
from jose.exceptions import JWTError, ExpiredSignatureError, JWTClaimsError
from pydantic import ValidationError

from schemas.users import UserContext, UserRole

import os
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Tokens are issued by the identity provider that fronts the admin and
# supplier portals. We only verify them here.
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE")


def get_current_user(request: Request) -> UserContext:
    """
    FastAPI dependency to validate the bearer JWT from the Authorization header
    and turn its claims into a UserContext.

    Usage:
        @router.get("/secure-data")
        def secure_endpoint(user: UserContext = Depends(get_current_user)):
            ...
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is missing",
        )

    # The token is expected to be in the format "Bearer <token>"
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    token = parts[1]
    options = {"verify_aud": JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET_KEY,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE,
            options=options,
        )
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except JWTClaimsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token claims: {e}"
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token validation failed: {e}"
        )

    try:
        return UserContext(
            id=str(payload.get("sub", "")),
            name=payload.get("name"),
            email=payload.get("email"),
            role=payload.get("role"),
        )
    except ValidationError:
        logger.warning("Rejected token with missing or unknown role claim")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token does not carry a valid role",
        )


def require_role(roles: List[str]):
    """Dependency factory restricting an endpoint to the given portal roles."""
    allowed = {UserRole(role) for role in roles}

    def _checker(user: UserContext = Depends(get_current_user)) -> UserContext:
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        return user

    return _checker


def get_user_identifier(user: UserContext) -> str:
    """Value stored in created_by/updated_by and the audit log."""
    if user is None:
        return "system"
    return user.email or user.name or user.id
