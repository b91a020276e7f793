"""
Mealwise API Endpoints
All API endpoint modules
"""

# Import all endpoint modules
from . import (
    health, auth, users, recipes, meal_plans, grocery_lists, ingredients, dashboard, videos
)

__all__ = [
    "health",
    "auth",
    "users",
    "recipes",
    "meal_plans",
    "grocery_lists",
    "ingredients",
    "dashboard",
    "videos"
]
