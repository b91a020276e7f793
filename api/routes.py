"""
Mealwise API Routes
Main router configuration for all API endpoints
"""

from fastapi import APIRouter
import structlog

from api.endpoints import (
    health, auth, users, recipes, meal_plans, grocery_lists, ingredients, dashboard, videos
)
logger = structlog.get_logger()

# Create main API router
api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"]
)

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"]
)

api_router.include_router(
    recipes.router,
    prefix="/recipes",
    tags=["recipes"]
)

api_router.include_router(
    meal_plans.router,
    prefix="/meal-plans",
    tags=["meal-plans"]
)

api_router.include_router(
    grocery_lists.router,
    prefix="/grocery-lists",
    tags=["grocery-lists"]
)

api_router.include_router(
    ingredients.router,
    prefix="/ingredients",
    tags=["ingredients"]
)

api_router.include_router(
    dashboard.router,
    prefix="/dashboard",
    tags=["dashboard"]
)

api_router.include_router(
    videos.router,
    prefix="/videos",
    tags=["videos"]
)

logger.info("API routes configured successfully")
