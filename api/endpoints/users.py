"""
Mealwise User Endpoints
Current user profile and counters
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.database import get_db
from core.dependencies import CurrentUser
from services.user_service import user_service
from schemas.user_schemas import UserResponse, UserStatsResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser):
    """Get the current user's profile"""
    return UserResponse.model_validate(current_user)


@router.get("/me/stats", response_model=UserStatsResponse)
async def get_my_stats(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Counts of the current user's recipes, meal plans, grocery lists and saved recipes"""
    try:
        stats = await user_service.get_user_stats(current_user, db)
        return UserStatsResponse(**stats)

    except Exception as e:
        logger.error(f"Failed to get stats for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get user stats"
        )
