"""
Mealwise Ingredient Parser
Turns free-text ingredient lines into quantity, unit, name and notes
"""

import re
import math
import logging
from typing import List, Optional
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Unicode vulgar fractions and their ASCII equivalents
UNICODE_FRACTIONS = {
    "½": "1/2",
    "⅓": "1/3",
    "⅔": "2/3",
    "¼": "1/4",
    "¾": "3/4",
    "⅕": "1/5",
    "⅖": "2/5",
    "⅗": "3/5",
    "⅘": "4/5",
    "⅙": "1/6",
    "⅚": "5/6",
    "⅛": "1/8",
    "⅜": "3/8",
    "⅝": "5/8",
    "⅞": "7/8",
}

# Decimal parts rendered back as fractions
DISPLAY_FRACTIONS = [
    (0.125, "1/8"),
    (0.167, "1/6"),
    (0.25, "1/4"),
    (0.333, "1/3"),
    (0.375, "3/8"),
    (0.5, "1/2"),
    (0.625, "5/8"),
    (0.667, "2/3"),
    (0.75, "3/4"),
    (0.833, "5/6"),
    (0.875, "7/8"),
]

UNIT_ABBREVIATIONS = {
    "tbsp": "tablespoon",
    "tbs": "tablespoon",
    "tbsps": "tablespoon",
    "tsp": "teaspoon",
    "tsps": "teaspoon",
    "lb": "pound",
    "lbs": "pound",
    "oz": "ounce",
    "ozs": "ounce",
    "g": "gram",
    "gs": "gram",
    "kg": "kilogram",
    "kgs": "kilogram",
    "ml": "milliliter",
    "l": "liter",
    "pt": "pint",
    "pts": "pint",
    "qt": "quart",
    "qts": "quart",
    "gal": "gallon",
    "c": "cup",
}

KNOWN_UNITS = {
    "cup", "tablespoon", "teaspoon", "pound", "ounce", "gram", "kilogram",
    "milliliter", "liter", "pint", "quart", "gallon", "piece", "clove",
    "can", "slice", "pinch", "dash", "stick", "package", "bunch", "head",
    "sprig", "jar", "bottle", "whole",
}

DESCRIPTOR_WORDS = {
    "chopped", "diced", "minced", "sliced", "grated", "shredded", "melted",
    "softened", "beaten", "crushed", "peeled", "fresh", "large", "small", "medium",
}

QUANTITY_PATTERN = re.compile(
    r"^(\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?)(?:\s*(?:-|to)\s*\d+(?:\.\d+)?(?:/\d+)?)?\s*"
)
METRIC_PARENTHETICAL = re.compile(
    r"\s*\([^)]*?\d+\s*(?:g|kg|ml|l|grams?|milliliters?)\b[^)]*\)", re.IGNORECASE
)
PARENTHETICAL = re.compile(r"\s*\(([^)]*)\)")
BULLET_PREFIX = re.compile(r"^[\*\-•]+\s*")


@dataclass
class ParsedIngredient:
    """Structured ingredient line"""
    quantity: float
    unit: str
    name: str
    notes: str = ""
    display_quantity: str = ""
    original_text: str = ""

    def to_dict(self):
        return {
            "quantity": self.quantity,
            "unit": self.unit,
            "name": self.name,
            "notes": self.notes,
            "display_quantity": self.display_quantity,
        }


def _replace_unicode_fractions(text: str) -> str:
    """'1½' -> '1 1/2', '½' -> '1/2'"""
    for symbol, ascii_fraction in UNICODE_FRACTIONS.items():
        text = re.sub(rf"(\d)\s*{symbol}", rf"\1 {ascii_fraction}", text)
        text = text.replace(symbol, ascii_fraction)
    return text


class IngredientParser:
    """Rule-based parser for recipe ingredient lines"""

    def parse_quantity(self, text: str) -> float:
        """
        Parse a quantity string
        Handles mixed numbers, fractions, decimals, integers and unicode fractions.
        Returns 1 when nothing can be parsed.
        """
        if text is None:
            return 1.0

        trimmed = _replace_unicode_fractions(str(text)).strip()

        mixed = re.match(r"^(\d+)\s+(\d+)/(\d+)$", trimmed)
        if mixed:
            denominator = int(mixed.group(3))
            if denominator == 0:
                return 1.0
            return int(mixed.group(1)) + int(mixed.group(2)) / denominator

        fraction = re.match(r"^(\d+)/(\d+)$", trimmed)
        if fraction:
            denominator = int(fraction.group(2))
            if denominator == 0:
                return 1.0
            return int(fraction.group(1)) / denominator

        number = re.match(r"^\d+(?:\.\d+)?$", trimmed)
        if number:
            return float(trimmed)

        return 1.0

    def format_quantity_for_display(self, value: float) -> str:
        """Render a quantity as a kitchen-friendly string: 1.5 -> '1 1/2'"""
        if value is None:
            return ""
        if float(value).is_integer():
            return str(int(value))

        whole = math.floor(value)
        fractional = value - whole
        for decimal, fraction in DISPLAY_FRACTIONS:
            if abs(fractional - decimal) < 0.01:
                return fraction if whole == 0 else f"{whole} {fraction}"

        return f"{round(value, 2):.2f}".rstrip("0").rstrip(".")

    def normalize_unit(self, unit: Optional[str]) -> str:
        """Lowercase, expand abbreviations and singularize a unit"""
        if not unit:
            return ""

        normalized = unit.lower().strip().rstrip(".")
        if normalized in UNIT_ABBREVIATIONS:
            return UNIT_ABBREVIATIONS[normalized]
        if normalized in KNOWN_UNITS:
            return normalized
        if normalized.endswith("es") and normalized[:-2] in KNOWN_UNITS:
            return normalized[:-2]
        if normalized.endswith("s") and normalized[:-1] in KNOWN_UNITS:
            return normalized[:-1]
        return normalized

    def parse_ingredient_line(self, line: str) -> ParsedIngredient:
        """
        Parse a single ingredient line

        Examples:
        - "1 cup (227g) unsalted butter, room temperature"
          -> 1 cup "unsalted butter", notes "room temperature"
        - "2 large eggs" -> 2 piece "eggs", notes "large"
        - "salt to taste" -> 1 piece "salt to taste"
        """
        original = line or ""
        text = BULLET_PREFIX.sub("", original.strip())
        text = re.sub(r"\s+", " ", text).strip()
        cleaned = text

        text = _replace_unicode_fractions(text)
        text = METRIC_PARENTHETICAL.sub("", text)

        notes: List[str] = [note.strip() for note in PARENTHETICAL.findall(text) if note.strip()]
        text = PARENTHETICAL.sub("", text).strip()

        if "," in text:
            text, trailing = text.split(",", 1)
            if trailing.strip():
                notes.append(trailing.strip())
            text = text.strip()

        quantity_match = QUANTITY_PATTERN.match(text)
        if not quantity_match:
            return self._fallback(cleaned)

        quantity = self.parse_quantity(quantity_match.group(1))
        remainder = text[quantity_match.end():].strip()

        unit = "piece"
        words = remainder.split(" ") if remainder else []
        if words and self.normalize_unit(words[0]) in KNOWN_UNITS:
            unit = self.normalize_unit(words[0])
            words = words[1:]

        if words and words[0].lower() == "of":
            words = words[1:]

        name, descriptor_notes = self._split_descriptors(words)
        if not name:
            return self._fallback(cleaned)

        all_notes = descriptor_notes + notes
        return ParsedIngredient(
            quantity=quantity,
            unit=unit,
            name=name,
            notes=", ".join(all_notes),
            display_quantity=self.format_quantity_for_display(quantity),
            original_text=original,
        )

    def parse_ingredients_from_text(self, text: str) -> List[ParsedIngredient]:
        """Parse every non-blank line of a block of text"""
        return [
            self.parse_ingredient_line(line)
            for line in (text or "").splitlines()
            if line.strip()
        ]

    def parse_print_format_ingredients(self, text: str) -> List[ParsedIngredient]:
        """Parse only '*'-bulleted lines, as produced by recipe print views"""
        return [
            self.parse_ingredient_line(line)
            for line in (text or "").splitlines()
            if line.strip().startswith("*")
        ]

    def _split_descriptors(self, words: List[str]) -> tuple:
        """Move preparation/size words out of the name into notes"""
        joined = " ".join(words)
        notes = []
        if re.search(r"\broom temperature\b", joined, re.IGNORECASE):
            notes.append("room temperature")
            joined = re.sub(r"\s*\broom temperature\b", "", joined, flags=re.IGNORECASE)

        name_words = []
        for word in joined.split():
            if word.lower() in DESCRIPTOR_WORDS:
                notes.append(word.lower())
            else:
                name_words.append(word)

        name = " ".join(name_words).strip()
        if not name and joined.strip():
            return joined.strip(), []
        return name, notes

    def _fallback(self, text: str) -> ParsedIngredient:
        return ParsedIngredient(
            quantity=1.0,
            unit="piece",
            name=text,
            notes="",
            display_quantity="1",
            original_text=text,
        )


# Global parser instance
ingredient_parser = IngredientParser()
