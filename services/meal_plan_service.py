"""
Mealwise Meal Planning Service
Meal plans, day/slot assignment and grocery list generation
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Any, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.users import User
from models.recipe_models import Recipe
from models.meal_planning_models import (
    MealPlan, MealPlanDay, MealPlanMeal, MealType, GroceryList, GroceryListItem
)
from middleware.logging import log_business_event
from utils.date_utils import utcnow, is_date_in_range

logger = logging.getLogger(__name__)

MEAL_TYPES = {meal_type.value for meal_type in MealType}


class MealPlanService:
    """Service for meal plans and the grocery lists generated from them"""

    async def create_meal_plan(
        self,
        user: User,
        name: str,
        start_date: date,
        end_date: date,
        db: AsyncSession,
        description: Optional[str] = None,
        is_active: bool = True,
    ) -> MealPlan:
        if not name or not name.strip():
            raise ValueError("Meal plan name is required")
        if end_date < start_date:
            raise ValueError("End date must be on or after start date")

        meal_plan = MealPlan(
            user_id=user.id,
            name=name.strip(),
            description=description,
            start_date=start_date,
            end_date=end_date,
            is_active=is_active,
        )
        meal_plan.days = []
        db.add(meal_plan)
        await db.flush()

        logger.info(f"Created meal plan {meal_plan.id} for user {user.id}")
        log_business_event("meal_plan_created", {
            "meal_plan_id": meal_plan.id,
            "days": (end_date - start_date).days + 1,
        })
        return meal_plan

    async def get_user_meal_plans(self, user: User, db: AsyncSession) -> List[MealPlan]:
        result = await db.execute(
            select(MealPlan)
            .where(MealPlan.user_id == user.id, MealPlan.is_active.is_(True))
            .order_by(MealPlan.created_at.desc(), MealPlan.id.desc())
        )
        return list(result.scalars().all())

    async def get_meal_plan_by_id(self, user: User, plan_id: int, db: AsyncSession) -> Optional[MealPlan]:
        result = await db.execute(
            select(MealPlan).where(
                MealPlan.id == plan_id,
                MealPlan.user_id == user.id,
                MealPlan.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def add_meals_to_day(
        self,
        user: User,
        plan_id: int,
        day_date: date,
        meals: List[Dict[str, Any]],
        db: AsyncSession,
    ) -> Optional[MealPlanDay]:
        """
        Assign recipes to meal slots on one day of a plan

        Each meal is {meal_type, recipe_id, servings}. An existing meal in the
        same slot is replaced.

        Returns:
            The updated day, or None if the plan does not exist
        """
        meal_plan = await self.get_meal_plan_by_id(user, plan_id, db)
        if not meal_plan:
            return None

        if not is_date_in_range(day_date, meal_plan.start_date, meal_plan.end_date):
            raise ValueError("Date is outside the meal plan range")

        day = next((existing for existing in meal_plan.days if existing.date == day_date), None)
        if day is None:
            day = MealPlanDay(date=day_date)
            day.meals = []
            meal_plan.days.append(day)

        for meal in meals:
            meal_type = str(meal.get("meal_type", "")).lower()
            if meal_type not in MEAL_TYPES:
                raise ValueError(f"Unknown meal type: {meal.get('meal_type')}")

            recipe = await self._get_visible_recipe(user, meal.get("recipe_id"), db)
            if not recipe:
                raise ValueError(f"Recipe {meal.get('recipe_id')} not found")

            servings = 1 if meal.get("servings") is None else int(meal["servings"])
            if servings < 1:
                raise ValueError("Servings must be at least 1")

            slot = next((existing for existing in day.meals if existing.meal_type == meal_type), None)
            if slot:
                slot.recipe = recipe
                slot.servings = servings
            else:
                day.meals.append(MealPlanMeal(meal_type=meal_type, recipe=recipe, servings=servings))

        meal_plan.updated_at = utcnow()
        await db.flush()

        logger.info(f"Added {len(meals)} meals to plan {plan_id} on {day_date.isoformat()}")
        return day

    async def remove_meal_from_day(
        self,
        user: User,
        plan_id: int,
        day_date: date,
        meal_type: str,
        db: AsyncSession,
    ) -> bool:
        meal_plan = await self.get_meal_plan_by_id(user, plan_id, db)
        if not meal_plan:
            return False

        day = next((existing for existing in meal_plan.days if existing.date == day_date), None)
        if not day:
            return False

        slot = next((meal for meal in day.meals if meal.meal_type == (meal_type or "").lower()), None)
        if not slot:
            return False

        day.meals.remove(slot)
        meal_plan.updated_at = utcnow()
        await db.flush()
        return True

    async def delete_meal_plan(self, user: User, plan_id: int, db: AsyncSession) -> bool:
        """Soft delete: the plan is deactivated, not removed"""
        meal_plan = await self.get_meal_plan_by_id(user, plan_id, db)
        if not meal_plan:
            return False

        meal_plan.is_active = False
        meal_plan.updated_at = utcnow()
        await db.flush()
        return True

    async def generate_grocery_list(self, user: User, plan_id: int, db: AsyncSession) -> Optional[int]:
        """
        Build a grocery list from every meal in a plan

        Ingredient quantities are scaled by planned servings over recipe
        servings and combined by (lowercase name, unit).

        Returns:
            The new grocery list id, or None if the plan does not exist
        """
        meal_plan = await self.get_meal_plan_by_id(user, plan_id, db)
        if not meal_plan:
            return None

        planned: Dict[int, Tuple[Recipe, int]] = {}
        for day in meal_plan.days:
            for meal in day.meals:
                recipe, servings = planned.get(meal.recipe_id, (meal.recipe, 0))
                planned[meal.recipe_id] = (recipe, servings + meal.servings)

        combined: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for recipe, planned_servings in planned.values():
            multiplier = planned_servings / (recipe.servings or 1)
            for ri in recipe.ingredients:
                key = (ri.name.lower(), ri.unit)
                entry = combined.setdefault(key, {"name": ri.name, "unit": ri.unit, "quantity": 0.0})
                entry["quantity"] += ri.quantity * multiplier

        grocery_list = GroceryList(
            user_id=user.id,
            meal_plan_id=meal_plan.id,
            name=f"{meal_plan.name} - Grocery List",
        )
        grocery_list.items = [
            GroceryListItem(
                name=entry["name"].capitalize(),
                quantity=round(entry["quantity"], 2),
                unit=entry["unit"],
                is_completed=False,
            )
            for entry in sorted(combined.values(), key=lambda item: item["name"])
        ]
        db.add(grocery_list)
        await db.flush()

        logger.info(f"Generated grocery list {grocery_list.id} with {len(grocery_list.items)} items")
        log_business_event("grocery_list_generated", {
            "grocery_list_id": grocery_list.id,
            "meal_plan_id": meal_plan.id,
            "items": len(grocery_list.items),
        })
        return grocery_list.id

    async def get_user_grocery_lists(self, user: User, db: AsyncSession) -> List[GroceryList]:
        result = await db.execute(
            select(GroceryList)
            .where(GroceryList.user_id == user.id)
            .order_by(GroceryList.created_at.desc(), GroceryList.id.desc())
        )
        return list(result.scalars().all())

    async def get_grocery_list(self, user: User, list_id: int, db: AsyncSession) -> Optional[GroceryList]:
        result = await db.execute(
            select(GroceryList).where(GroceryList.id == list_id, GroceryList.user_id == user.id)
        )
        return result.scalar_one_or_none()

    async def set_item_completed(
        self,
        user: User,
        list_id: int,
        item_id: int,
        is_completed: bool,
        db: AsyncSession,
    ) -> Optional[GroceryListItem]:
        grocery_list = await self.get_grocery_list(user, list_id, db)
        if not grocery_list:
            return None

        item = next((existing for existing in grocery_list.items if existing.id == item_id), None)
        if not item:
            return None

        item.is_completed = is_completed
        await db.flush()
        return item

    async def delete_grocery_list(self, user: User, list_id: int, db: AsyncSession) -> bool:
        grocery_list = await self.get_grocery_list(user, list_id, db)
        if not grocery_list:
            return False

        await db.delete(grocery_list)
        await db.flush()
        return True

    async def _get_visible_recipe(self, user: User, recipe_id: Any, db: AsyncSession) -> Optional[Recipe]:
        """Local recipes only: the user's own or public ones"""
        try:
            recipe_id = int(recipe_id)
        except (TypeError, ValueError):
            return None

        result = await db.execute(select(Recipe).where(Recipe.id == recipe_id))
        recipe = result.scalar_one_or_none()
        if recipe and (recipe.user_id == user.id or recipe.is_public):
            return recipe
        return None


# Global service instance
meal_plan_service = MealPlanService()
