"""
Mealwise Statistics Service
Dashboard counters, recipe source breakdown and recent activity
"""

import logging
from typing import Dict, List, Optional, Any

from sqlalchemy import select, func, distinct
from sqlalchemy.ext.asyncio import AsyncSession

from models.users import User
from models.recipe_models import Recipe, RecipeIngredient, SavedRecipe, ImportSource
from models.meal_planning_models import MealPlan, GroceryList

logger = logging.getLogger(__name__)

EMPTY_STATISTICS = {
    "total_recipes": 0,
    "saved_recipes": 0,
    "imported_recipes": 0,
    "shared_recipes": 0,
    "meal_plans": 0,
    "grocery_lists": 0,
    "total_ingredients": 0,
}

BREAKDOWN_SOURCES = ("spoonacular", "ocr", "url", "manual", "shared", "video")


class StatisticsService:

    async def get_user_statistics(self, user: Optional[User], db: AsyncSession) -> Dict[str, int]:
        if user is None:
            return dict(EMPTY_STATISTICS)

        async def scalar(statement) -> int:
            result = await db.execute(statement)
            return result.scalar() or 0

        recipe_count = select(func.count()).select_from(Recipe).where(Recipe.user_id == user.id)

        return {
            "total_recipes": await scalar(recipe_count),
            "saved_recipes": await scalar(
                select(func.count()).select_from(SavedRecipe).where(SavedRecipe.user_id == user.id)
            ),
            "imported_recipes": await scalar(
                recipe_count.where(Recipe.import_source != ImportSource.MANUAL.value)
            ),
            "shared_recipes": await scalar(recipe_count.where(Recipe.is_public.is_(True))),
            "meal_plans": await scalar(
                select(func.count()).select_from(MealPlan)
                .where(MealPlan.user_id == user.id, MealPlan.is_active.is_(True))
            ),
            "grocery_lists": await scalar(
                select(func.count()).select_from(GroceryList).where(GroceryList.user_id == user.id)
            ),
            "total_ingredients": await scalar(
                select(func.count(distinct(RecipeIngredient.ingredient_id)))
                .join(Recipe, RecipeIngredient.recipe_id == Recipe.id)
                .where(Recipe.user_id == user.id)
            ),
        }

    async def get_recipe_breakdown(self, user: User, db: AsyncSession) -> Dict[str, int]:
        """Recipe counts per import source"""
        result = await db.execute(
            select(Recipe.import_source, func.count())
            .where(Recipe.user_id == user.id)
            .group_by(Recipe.import_source)
        )
        counts = {source: count for source, count in result.all()}
        return {source: counts.get(source, 0) for source in BREAKDOWN_SOURCES}

    async def get_recent_activity(self, user: User, db: AsyncSession, limit: int = 5) -> List[Dict[str, Any]]:
        """Newest recipes, meal plans and grocery lists merged into one feed"""
        activity = []

        recipes = await db.execute(
            select(Recipe.id, Recipe.title, Recipe.created_at)
            .where(Recipe.user_id == user.id)
            .order_by(Recipe.created_at.desc())
            .limit(limit)
        )
        activity.extend(
            {"type": "recipe", "id": row.id, "title": row.title, "created_at": row.created_at}
            for row in recipes.all()
        )

        plans = await db.execute(
            select(MealPlan.id, MealPlan.name, MealPlan.created_at)
            .where(MealPlan.user_id == user.id, MealPlan.is_active.is_(True))
            .order_by(MealPlan.created_at.desc())
            .limit(limit)
        )
        activity.extend(
            {"type": "meal_plan", "id": row.id, "title": row.name, "created_at": row.created_at}
            for row in plans.all()
        )

        lists = await db.execute(
            select(GroceryList.id, GroceryList.name, GroceryList.created_at)
            .where(GroceryList.user_id == user.id)
            .order_by(GroceryList.created_at.desc())
            .limit(limit)
        )
        activity.extend(
            {"type": "grocery_list", "id": row.id, "title": row.name, "created_at": row.created_at}
            for row in lists.all()
        )

        activity.sort(key=lambda item: item["created_at"], reverse=True)
        return [
            dict(item, created_at=item["created_at"].isoformat())
            for item in activity[:limit]
        ]


# Global service instance
statistics_service = StatisticsService()
