"""
Mealwise User Schemas
Pydantic models for user API responses
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None


class UserStatsResponse(BaseModel):
    recipes: int
    meal_plans: int
    grocery_lists: int
    saved_recipes: int


class SyncedUser(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    provider: str


class SyncResponse(BaseModel):
    success: bool
    user: SyncedUser
