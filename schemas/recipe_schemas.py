"""
Mealwise Recipe Schemas
Pydantic models for recipe API requests
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from models.recipe_models import ImportSource


class RecipeIngredientInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(1, ge=0)
    unit: str = Field("piece", max_length=50)
    notes: Optional[str] = None
    is_optional: bool = False


class RecipeBase(BaseModel):
    description: Optional[str] = None
    prep_time: Optional[int] = Field(None, ge=0)  # minutes
    cook_time: Optional[int] = Field(None, ge=0)  # minutes
    difficulty: Optional[str] = Field(None, max_length=50)
    cuisine: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)
    source_url: Optional[str] = Field(None, max_length=1000)


class RecipeCreate(RecipeBase):
    title: str = Field(..., min_length=1, max_length=255)
    servings: int = Field(1, ge=1)
    tags: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    is_public: bool = False
    external_id: Optional[str] = None
    import_source: ImportSource = ImportSource.MANUAL
    ingredients: List[RecipeIngredientInput] = Field(default_factory=list)

    @field_validator("tags", "instructions")
    @classmethod
    def drop_blank_entries(cls, v):
        return [item.strip() for item in v if item and item.strip()]


class RecipeUpdate(RecipeBase):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    servings: Optional[int] = Field(None, ge=1)
    tags: Optional[List[str]] = None
    instructions: Optional[List[str]] = None
    is_public: Optional[bool] = None
    ingredients: Optional[List[RecipeIngredientInput]] = None


class SavedRecipeRequest(BaseModel):
    """Save or unsave a local (numeric) or catalogue (external-n) recipe"""
    recipe_id: Optional[str] = None
    action: str = "save"
    title: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("recipe_id", mode="before")
    @classmethod
    def coerce_recipe_id(cls, v):
        return str(v) if v is not None else v


class IngredientParseRequest(BaseModel):
    text: str = Field(..., max_length=20000)
    print_format: bool = False
