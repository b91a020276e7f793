"""
Mealwise Ingredient Conversion Service
Recipe-to-shopping quantity conversion, unit standardization and aggregation
"""

import math
import logging
from typing import List, Dict, Any, Optional, Iterable, Tuple
from dataclasses import dataclass, field
from enum import Enum

from services.ingredient_parser import ingredient_parser

logger = logging.getLogger(__name__)


class UnitType(Enum):
    """Types of measurement units"""
    VOLUME = "volume"
    WEIGHT = "weight"
    COUNT = "count"
    OTHER = "other"


@dataclass
class ConvertedQuantity:
    """Shopping-friendly quantity alongside what the recipe asked for"""
    quantity: float
    unit: str
    original_quantity: float
    original_unit: str


@dataclass
class AggregatedIngredient:
    """Ingredient combined across several recipes"""
    name: str
    quantity: float
    unit: str
    display: str
    recipes: List[str] = field(default_factory=list)
    category: str = "unknown"
    original_quantity: Optional[float] = None
    original_unit: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "total_quantity": self.quantity,
            "unit": self.unit,
            "display": self.display,
            "recipes": self.recipes,
            "category": self.category,
            "original_quantity": self.original_quantity,
            "original_unit": self.original_unit,
        }


# (ingredient name, recipe unit) -> (shopping unit, factor)
CONVERSION_RULES: Dict[Tuple[str, str], Tuple[str, float]] = {
    # Cooked/shredded chicken by the cup -> breasts to buy
    ("chicken", "cup"): ("piece", 2),
    ("chicken breast", "cup"): ("piece", 2),
    ("shredded chicken", "cup"): ("piece", 2),
    ("ground beef", "cup"): ("pound", 0.5),
    ("beef", "cup"): ("pound", 0.5),
    # Cooked volume -> dry volume
    ("rice", "cup"): ("cup", 0.5),
    ("cooked rice", "cup"): ("cup", 0.5),
    ("pasta", "cup"): ("cup", 0.5),
    ("cooked pasta", "cup"): ("cup", 0.5),
    ("onion", "cup"): ("piece", 0.5),
    ("chopped onion", "cup"): ("piece", 0.5),
    ("carrot", "cup"): ("piece", 2),
    ("chopped carrot", "cup"): ("piece", 2),
}


class IngredientConversionService:
    """Service for converting and aggregating recipe ingredients for shopping"""

    def __init__(self):
        # Standard units: ml for volume, g for weight
        self.unit_conversions = {
            "cup": {"factor": 240, "type": UnitType.VOLUME},
            "tablespoon": {"factor": 15, "type": UnitType.VOLUME},
            "teaspoon": {"factor": 5, "type": UnitType.VOLUME},
            "pint": {"factor": 480, "type": UnitType.VOLUME},
            "quart": {"factor": 960, "type": UnitType.VOLUME},
            "gallon": {"factor": 3785, "type": UnitType.VOLUME},
            "liter": {"factor": 1000, "type": UnitType.VOLUME},
            "milliliter": {"factor": 1, "type": UnitType.VOLUME},

            "pound": {"factor": 454, "type": UnitType.WEIGHT},
            "ounce": {"factor": 28, "type": UnitType.WEIGHT},
            "kilogram": {"factor": 1000, "type": UnitType.WEIGHT},
            "gram": {"factor": 1, "type": UnitType.WEIGHT},

            "piece": {"factor": 1, "type": UnitType.COUNT},
            "clove": {"factor": 1, "type": UnitType.COUNT},
            "can": {"factor": 1, "type": UnitType.COUNT},
            "slice": {"factor": 1, "type": UnitType.COUNT},
            "stick": {"factor": 1, "type": UnitType.COUNT},
            "bunch": {"factor": 1, "type": UnitType.COUNT},
            "head": {"factor": 1, "type": UnitType.COUNT},
        }

    def convert_ingredient_quantity(self, name: str, quantity: float, unit: str) -> ConvertedQuantity:
        """
        Convert a recipe amount into what to buy
        Quantities are always rounded up to whole shopping units.
        """
        normalized_unit = ingredient_parser.normalize_unit(unit) or unit
        rule = CONVERSION_RULES.get(((name or "").lower().strip(), normalized_unit))

        if rule:
            to_unit, factor = rule
            return ConvertedQuantity(
                quantity=math.ceil(quantity * factor),
                unit=to_unit,
                original_quantity=quantity,
                original_unit=unit,
            )

        return ConvertedQuantity(
            quantity=math.ceil(quantity),
            unit=unit,
            original_quantity=quantity,
            original_unit=unit,
        )

    def format_shopping_quantity(self, quantity: float, unit: str) -> str:
        """'2 pieces', '1 cup', '3 tbsp'"""
        rounded = math.ceil(quantity)
        unit_lower = (unit or "").lower()

        if unit_lower in ("piece", "pieces"):
            return f"{rounded} {'piece' if rounded == 1 else 'pieces'}"
        if unit_lower in ("cup", "cups"):
            return f"{rounded} {'cup' if rounded == 1 else 'cups'}"
        if unit_lower in ("pound", "pounds"):
            return f"{rounded} {'pound' if rounded == 1 else 'pounds'}"
        if unit_lower in ("tbsp", "tablespoon"):
            return f"{rounded} tbsp"
        if unit_lower in ("tsp", "teaspoon"):
            return f"{rounded} tsp"
        return f"{rounded} {unit}"

    def get_unit_type(self, unit: str) -> UnitType:
        info = self.unit_conversions.get(ingredient_parser.normalize_unit(unit))
        return info["type"] if info else UnitType.OTHER

    def convert_to_standard_unit(self, quantity: float, unit: str) -> Tuple[float, str, UnitType]:
        """Convert to ml (volume) or g (weight); count and unknown units pass through"""
        normalized = ingredient_parser.normalize_unit(unit)
        info = self.unit_conversions.get(normalized)
        if not info:
            return quantity, unit, UnitType.OTHER

        unit_type = info["type"]
        if unit_type == UnitType.VOLUME:
            return round(quantity * info["factor"], 2), "ml", unit_type
        if unit_type == UnitType.WEIGHT:
            return round(quantity * info["factor"], 2), "g", unit_type
        return quantity, normalized, unit_type

    def get_compatible_units(self, unit: str) -> List[str]:
        """Units of the same kind as the given unit"""
        unit_type = self.get_unit_type(unit)
        if unit_type in (UnitType.OTHER, UnitType.COUNT):
            return []

        normalized = ingredient_parser.normalize_unit(unit)
        return sorted(
            name for name, info in self.unit_conversions.items()
            if info["type"] == unit_type and name != normalized
        )

    def aggregate_ingredients(self, entries: Iterable[Dict[str, Any]]) -> List[AggregatedIngredient]:
        """
        Combine ingredient entries by name and converted unit

        Each entry is a dict with name, quantity, unit, and optionally
        recipe_title and category.
        """
        groups: Dict[Tuple[str, str], AggregatedIngredient] = {}

        for entry in entries:
            name = (entry.get("name") or "").strip()
            if not name:
                continue

            converted = self.convert_ingredient_quantity(name, entry.get("quantity") or 0, entry.get("unit") or "piece")
            key = (name.lower(), converted.unit)
            recipe_title = entry.get("recipe_title")

            existing = groups.get(key)
            if existing:
                existing.quantity += converted.quantity
                if recipe_title and recipe_title not in existing.recipes:
                    existing.recipes.append(recipe_title)
                continue

            groups[key] = AggregatedIngredient(
                name=name,
                quantity=converted.quantity,
                unit=converted.unit,
                display="",
                recipes=[recipe_title] if recipe_title else [],
                category=entry.get("category") or "unknown",
                original_quantity=converted.original_quantity,
                original_unit=converted.original_unit,
            )

        aggregated = sorted(groups.values(), key=lambda item: item.name.lower())
        for item in aggregated:
            item.display = self.format_shopping_quantity(item.quantity, item.unit)

        logger.debug(f"Aggregated {len(aggregated)} ingredients")
        return aggregated


# Global service instance
ingredient_conversion_service = IngredientConversionService()
