"""
Mealwise Authentication Endpoints
Identity is delegated to the provider; this syncs the provider's user locally
"""

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.config import settings
from core.database import get_db
from core.dependencies import CurrentClaims
from services.user_service import user_service
from schemas.user_schemas import SyncResponse, SyncedUser
from middleware.logging import log_user_activity
from utils.request_utils import get_client_ip, get_user_agent

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/sync", response_model=SyncResponse)
async def sync_user(
    claims: CurrentClaims,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Create or update the local user for the verified provider identity

    Call after every sign-in; other endpoints return 404 until the user
    has been synced once.
    """
    try:
        user = await user_service.sync_user_from_auth(claims, db)

        log_user_activity("user_synced", {
            "user_id": user.id,
            "ip": get_client_ip(request),
            "user_agent": get_user_agent(request),
        })

        return SyncResponse(
            success=True,
            user=SyncedUser(
                id=user.id,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                provider=settings.AUTH_PROVIDER_NAME,
            )
        )

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"User sync failed for {claims.auth_provider_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to sync user"
        )
