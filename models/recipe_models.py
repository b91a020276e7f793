"""
Mealwise Recipe Models
Database models for recipes, ingredients and saved recipes
"""

from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey, Boolean, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
import enum

from core.database import Base
from utils.date_utils import utcnow


class ImportSource(str, enum.Enum):
    """Where a recipe came from"""
    MANUAL = "manual"
    SPOONACULAR = "spoonacular"
    URL = "url"
    OCR = "ocr"
    VIDEO = "video"
    SHARED = "shared"


class Recipe(Base):
    """Recipe model for storing recipe information"""
    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    prep_time = Column(Integer)  # in minutes
    cook_time = Column(Integer)  # in minutes
    servings = Column(Integer, default=1, nullable=False)
    difficulty = Column(String(50))
    cuisine = Column(String(100))

    tags = Column(JSON, default=list)
    instructions = Column(JSON, default=list)  # List of instruction steps

    image_url = Column(String(500))
    source_url = Column(String(1000))
    is_public = Column(Boolean, default=False, nullable=False)
    external_id = Column(String(255), index=True)
    import_source = Column(String(50), default=ImportSource.MANUAL.value, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="recipes")
    ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.order",
        lazy="selectin",
    )

    @property
    def total_time(self) -> int:
        return (self.prep_time or 0) + (self.cook_time or 0)

    def to_dict(self):
        """Convert recipe to dictionary"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "prep_time": self.prep_time,
            "cook_time": self.cook_time,
            "servings": self.servings,
            "difficulty": self.difficulty,
            "cuisine": self.cuisine,
            "tags": self.tags or [],
            "instructions": self.instructions or [],
            "image_url": self.image_url,
            "source_url": self.source_url,
            "is_public": self.is_public,
            "external_id": self.external_id,
            "import_source": self.import_source,
            "ingredients": [ri.to_dict() for ri in self.ingredients],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Ingredient(Base):
    """Shared ingredient catalogue, one row per lowercase name"""
    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    category = Column(String(100), default="unknown", nullable=False)
    common_units = Column(JSON, default=list)

    created_at = Column(DateTime, default=utcnow, nullable=False)


class RecipeIngredient(Base):
    """Ingredient line within a recipe"""
    __tablename__ = "recipe_ingredients"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False, index=True)
    quantity = Column(Float, default=1.0, nullable=False)
    unit = Column(String(50), default="piece", nullable=False)
    notes = Column(Text)
    is_optional = Column(Boolean, default=False, nullable=False)
    order = Column(Integer, default=0, nullable=False)

    recipe = relationship("Recipe", back_populates="ingredients")
    ingredient = relationship("Ingredient", lazy="joined")

    @property
    def name(self) -> str:
        return self.ingredient.name if self.ingredient else ""

    def to_dict(self):
        return {
            "id": self.id,
            "ingredient_id": self.ingredient_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "notes": self.notes,
            "is_optional": self.is_optional,
            "order": self.order,
        }


class SavedRecipe(Base):
    """Bookmark from a user to a local or external recipe"""
    __tablename__ = "saved_recipes"
    __table_args__ = (
        UniqueConstraint("user_id", "recipe_id", name="uq_saved_recipes_user_recipe"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Local ids are stored as strings so external ids like "external-3" fit the same column
    recipe_id = Column(String(255), nullable=False)
    title = Column(String(255))
    image_url = Column(String(500))

    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="saved_recipes")

    @property
    def is_external(self) -> bool:
        return self.recipe_id.startswith("external-")

    def to_dict(self):
        return {
            "id": self.id,
            "recipe_id": self.recipe_id,
            "title": self.title,
            "image_url": self.image_url,
            "is_external": self.is_external,
            "saved_at": self.created_at.isoformat() if self.created_at else None,
        }
