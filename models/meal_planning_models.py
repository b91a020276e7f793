"""
Mealwise Meal Planning Models
SQLAlchemy models for meal plans and grocery lists
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Date, Boolean, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
import enum

from core.database import Base
from utils.date_utils import utcnow, calculate_meal_plan_duration


class MealType(str, enum.Enum):
    """Meal slot within a day"""
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class MealPlan(Base):
    """
    Main meal plan model
    A dated range of days, each with recipes assigned to meal slots
    """
    __tablename__ = "meal_plans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="meal_plans")
    days = relationship(
        "MealPlanDay",
        back_populates="meal_plan",
        cascade="all, delete-orphan",
        order_by="MealPlanDay.date",
        lazy="selectin",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "is_active": self.is_active,
            "duration": calculate_meal_plan_duration(self.start_date, self.end_date),
            "days": [day.to_dict() for day in self.days],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class MealPlanDay(Base):
    """Single calendar day inside a meal plan"""
    __tablename__ = "meal_plan_days"
    __table_args__ = (
        UniqueConstraint("meal_plan_id", "date", name="uq_meal_plan_days_plan_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    meal_plan_id = Column(Integer, ForeignKey("meal_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    meal_plan = relationship("MealPlan", back_populates="days")
    meals = relationship(
        "MealPlanMeal",
        back_populates="day",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "meals": [meal.to_dict() for meal in self.meals],
        }


class MealPlanMeal(Base):
    """Recipe assigned to a meal slot; one per slot per day"""
    __tablename__ = "meal_plan_meals"
    __table_args__ = (
        UniqueConstraint("meal_plan_day_id", "meal_type", name="uq_meal_plan_meals_day_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    meal_plan_day_id = Column(Integer, ForeignKey("meal_plan_days.id", ondelete="CASCADE"), nullable=False, index=True)
    meal_type = Column(String(20), nullable=False)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    servings = Column(Integer, default=1, nullable=False)

    day = relationship("MealPlanDay", back_populates="meals")
    recipe = relationship("Recipe", lazy="selectin")

    def to_dict(self):
        return {
            "id": self.id,
            "meal_type": self.meal_type,
            "recipe_id": self.recipe_id,
            "recipe_title": self.recipe.title if self.recipe else None,
            "servings": self.servings,
        }


class GroceryList(Base):
    """Shopping list, usually generated from a meal plan"""
    __tablename__ = "grocery_lists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    meal_plan_id = Column(Integer, ForeignKey("meal_plans.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="grocery_lists")
    items = relationship(
        "GroceryListItem",
        back_populates="grocery_list",
        cascade="all, delete-orphan",
        order_by="GroceryListItem.id",
        lazy="selectin",
    )

    def to_dict(self):
        completed = sum(1 for item in self.items if item.is_completed)
        return {
            "id": self.id,
            "name": self.name,
            "meal_plan_id": self.meal_plan_id,
            "total_items": len(self.items),
            "completed_items": completed,
            "items": [item.to_dict() for item in self.items],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class GroceryListItem(Base):
    __tablename__ = "grocery_list_items"

    id = Column(Integer, primary_key=True, index=True)
    grocery_list_id = Column(Integer, ForeignKey("grocery_lists.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    quantity = Column(Float, default=1.0, nullable=False)
    unit = Column(String(50), nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)

    grocery_list = relationship("GroceryList", back_populates="items")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "is_completed": self.is_completed,
        }
