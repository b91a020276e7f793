"""
Mealwise Core Dependencies
FastAPI dependencies for authentication and common functionality
"""

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Annotated
import logging

from core.database import get_db
from services.auth_service import token_verifier, AuthClaims, AuthenticationError
from services.user_service import user_service
from models.users import User
from utils.request_utils import get_client_ip

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)

MAX_PAGE_SIZE = 100


async def get_current_claims(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthClaims:
    """
    Verify the bearer token issued by the identity provider

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not credentials:
        raise credentials_exception

    try:
        return token_verifier.decode(credentials.credentials)
    except AuthenticationError as e:
        logger.warning(f"Authentication failed: {str(e)}", extra={
            "ip": get_client_ip(request),
            "error": str(e)
        })
        raise credentials_exception


async def get_current_user(
    claims: Annotated[AuthClaims, Depends(get_current_claims)],
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Resolve the local user for a verified token

    Raises:
        HTTPException: 404 if the user has not been synced yet
    """
    user = await user_service.get_user_by_auth_id(claims.auth_provider_id, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


async def get_pagination_params(
    limit: int = 20,
    offset: int = 0
) -> dict:
    """Validated limit/offset pagination"""
    if limit < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Limit must be greater than 0"
        )

    if limit > MAX_PAGE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Limit cannot exceed {MAX_PAGE_SIZE}"
        )

    if offset < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Offset cannot be negative"
        )

    return {"limit": limit, "offset": offset}


# Type aliases for common dependencies
CurrentClaims = Annotated[AuthClaims, Depends(get_current_claims)]
CurrentUser = Annotated[User, Depends(get_current_user)]
PaginationParams = Annotated[dict, Depends(get_pagination_params)]
