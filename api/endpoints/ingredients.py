"""
Mealwise Ingredient Endpoints
Shopping-style overview of every ingredient across the user's recipes
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.database import get_db
from core.dependencies import CurrentUser
from services.recipe_service import recipe_service
from services.ingredient_conversion import ingredient_conversion_service
from services.ingredient_parser import ingredient_parser
from schemas.recipe_schemas import IngredientParseRequest

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/")
async def get_ingredients(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """
    Aggregate the ingredients of every recipe the user owns

    Quantities are converted to shopping units, then combined by name and
    converted unit. Each entry lists the recipes it came from.
    """
    try:
        recipes = await recipe_service.get_user_recipes(current_user, db)

        entries = [
            {
                "name": ri.name,
                "quantity": ri.quantity,
                "unit": ri.unit,
                "recipe_title": recipe.title,
                "category": ri.ingredient.category if ri.ingredient else "unknown",
            }
            for recipe in recipes
            for ri in recipe.ingredients
        ]

        aggregated = ingredient_conversion_service.aggregate_ingredients(entries)
        return {
            "ingredients": [ingredient.to_dict() for ingredient in aggregated],
            "total_count": len(aggregated)
        }

    except Exception as e:
        logger.error(f"Failed to aggregate ingredients for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get ingredients"
        )


@router.post("/parse")
async def parse_ingredients(
    request: IngredientParseRequest,
    current_user: CurrentUser
):
    """Parse free-text ingredient lines into quantity, unit, name and notes"""
    if request.print_format:
        parsed = ingredient_parser.parse_print_format_ingredients(request.text)
    else:
        parsed = ingredient_parser.parse_ingredients_from_text(request.text)

    return {
        "ingredients": [ingredient.to_dict() for ingredient in parsed],
        "total_count": len(parsed)
    }
