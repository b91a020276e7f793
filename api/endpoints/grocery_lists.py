"""
Mealwise Grocery List Endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.database import get_db
from core.dependencies import CurrentUser
from services.meal_plan_service import meal_plan_service
from schemas.meal_planning_schemas import GroceryItemUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/")
async def get_grocery_lists(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    try:
        grocery_lists = await meal_plan_service.get_user_grocery_lists(current_user, db)
        return {
            "grocery_lists": [grocery_list.to_dict() for grocery_list in grocery_lists],
            "total": len(grocery_lists)
        }

    except Exception as e:
        logger.error(f"Failed to get grocery lists for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get grocery lists"
        )


@router.get("/{grocery_list_id}")
async def get_grocery_list(
    grocery_list_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    try:
        grocery_list = await meal_plan_service.get_grocery_list(current_user, grocery_list_id, db)
        if not grocery_list:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Grocery list not found"
            )
        return grocery_list.to_dict()

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get grocery list {grocery_list_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get grocery list"
        )


@router.patch("/{grocery_list_id}/items/{item_id}")
async def update_grocery_item(
    grocery_list_id: int,
    item_id: int,
    update: GroceryItemUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Check or uncheck a grocery list item"""
    try:
        item = await meal_plan_service.set_item_completed(
            current_user, grocery_list_id, item_id, update.is_completed, db
        )
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Grocery list item not found"
            )
        return item.to_dict()

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update item {item_id} on grocery list {grocery_list_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update grocery list item"
        )


@router.delete("/{grocery_list_id}")
async def delete_grocery_list(
    grocery_list_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    try:
        deleted = await meal_plan_service.delete_grocery_list(current_user, grocery_list_id, db)
        if not deleted:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Grocery list not found"
            )
        return {"success": True, "grocery_list_id": grocery_list_id}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete grocery list {grocery_list_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete grocery list"
        )
