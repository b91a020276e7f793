"""
Mealwise Database Models
Central import module for all database models
"""

from .users import User
from .recipe_models import Recipe, Ingredient, RecipeIngredient, SavedRecipe, ImportSource
from .meal_planning_models import (
    MealPlan,
    MealPlanDay,
    MealPlanMeal,
    MealType,
    GroceryList,
    GroceryListItem,
)

__all__ = [
    # User models
    "User",

    # Recipe models
    "Recipe",
    "Ingredient",
    "RecipeIngredient",
    "SavedRecipe",
    "ImportSource",

    # Meal planning models
    "MealPlan",
    "MealPlanDay",
    "MealPlanMeal",
    "MealType",
    "GroceryList",
    "GroceryListItem",
]
