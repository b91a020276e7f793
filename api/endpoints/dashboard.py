"""
Mealwise Dashboard Endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.database import get_db
from core.dependencies import CurrentUser
from services.statistics_service import statistics_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/stats")
async def get_dashboard_stats(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Counters, recipe source breakdown and recent activity for the dashboard"""
    try:
        return {
            "statistics": await statistics_service.get_user_statistics(current_user, db),
            "breakdown": await statistics_service.get_recipe_breakdown(current_user, db),
            "recent_activity": await statistics_service.get_recent_activity(current_user, db)
        }

    except Exception as e:
        logger.error(f"Failed to get dashboard stats for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get dashboard statistics"
        )
