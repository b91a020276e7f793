"""
Mealwise Meal Plan Endpoints
Meal plans, meal slot assignment and grocery list generation
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
import logging

from core.database import get_db
from core.dependencies import CurrentUser
from services.meal_plan_service import meal_plan_service
from schemas.meal_planning_schemas import MealPlanCreate, AddMealsRequest

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/")
async def get_meal_plans(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Active meal plans, newest first"""
    try:
        meal_plans = await meal_plan_service.get_user_meal_plans(current_user, db)
        return {
            "meal_plans": [meal_plan.to_dict() for meal_plan in meal_plans],
            "total": len(meal_plans)
        }

    except Exception as e:
        logger.error(f"Failed to get meal plans for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get meal plans"
        )


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_meal_plan(
    meal_plan_data: MealPlanCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    try:
        meal_plan = await meal_plan_service.create_meal_plan(
            user=current_user,
            name=meal_plan_data.name,
            description=meal_plan_data.description,
            start_date=meal_plan_data.start_date,
            end_date=meal_plan_data.end_date,
            is_active=meal_plan_data.is_active,
            db=db
        )
        return meal_plan.to_dict()

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Failed to create meal plan for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create meal plan"
        )


@router.get("/{meal_plan_id}")
async def get_meal_plan(
    meal_plan_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    try:
        meal_plan = await meal_plan_service.get_meal_plan_by_id(current_user, meal_plan_id, db)
        if not meal_plan:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Meal plan not found"
            )
        return meal_plan.to_dict()

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get meal plan {meal_plan_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get meal plan"
        )


@router.delete("/{meal_plan_id}")
async def delete_meal_plan(
    meal_plan_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Deactivate a meal plan"""
    try:
        deleted = await meal_plan_service.delete_meal_plan(current_user, meal_plan_id, db)
        if not deleted:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Meal plan not found"
            )
        return {"success": True, "meal_plan_id": meal_plan_id}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete meal plan {meal_plan_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete meal plan"
        )


@router.post("/{meal_plan_id}/meals")
async def add_meals(
    meal_plan_id: int,
    request: AddMealsRequest,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """
    Assign recipes to meal slots on one day

    A meal already planned in the same slot is replaced.
    """
    if not request.meals:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one meal is required"
        )

    try:
        day = await meal_plan_service.add_meals_to_day(
            current_user,
            meal_plan_id,
            request.date,
            [meal.model_dump() for meal in request.meals],
            db
        )
        if not day:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Meal plan not found"
            )
        return {"success": True, "day": day.to_dict()}

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Failed to add meals to plan {meal_plan_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add meals"
        )


@router.delete("/{meal_plan_id}/meals")
async def remove_meal(
    meal_plan_id: int,
    current_user: CurrentUser,
    day: date = Query(..., alias="date"),
    meal_type: str = Query(...),
    db: AsyncSession = Depends(get_db)
):
    try:
        removed = await meal_plan_service.remove_meal_from_day(current_user, meal_plan_id, day, meal_type, db)
        if not removed:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Meal not found"
            )
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to remove meal from plan {meal_plan_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove meal"
        )


@router.post("/{meal_plan_id}/grocery-list")
async def generate_grocery_list(
    meal_plan_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Generate a grocery list from every meal in the plan"""
    try:
        grocery_list_id = await meal_plan_service.generate_grocery_list(current_user, meal_plan_id, db)
        if grocery_list_id is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Meal plan not found"
            )
        return {"success": True, "grocery_list_id": grocery_list_id}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to generate grocery list for plan {meal_plan_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate grocery list"
        )
