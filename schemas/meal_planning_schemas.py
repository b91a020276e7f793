"""
Mealwise Meal Planning Schemas
Pydantic models for meal plan and grocery list API requests
"""

from typing import List, Optional, Union
from datetime import date
from pydantic import BaseModel, Field


class MealPlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    start_date: date
    end_date: date
    is_active: bool = True


class MealAssignment(BaseModel):
    # Meal type and recipe are checked by the service so bad values map to 400
    meal_type: str
    recipe_id: Union[int, str]
    servings: int = Field(1, ge=1)


class AddMealsRequest(BaseModel):
    date: date
    meals: List[MealAssignment] = Field(default_factory=list)


class GroceryItemUpdate(BaseModel):
    is_completed: bool
