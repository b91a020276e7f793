"""
Mealwise OCR Service
Recipe extraction from photos of recipe cards and cookbook pages
"""

import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field

from core.config import get_settings
from models.recipe_models import ImportSource
from services.ingredient_parser import ingredient_parser

settings = get_settings()
logger = logging.getLogger(__name__)


@dataclass
class ExtractedRecipe:
    """Raw text fields recognised in an image"""
    ingredients: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    title: Optional[str] = None
    cooking_time: Optional[str] = None
    servings: Optional[str] = None
    difficulty: Optional[str] = None
    raw_text: str = ""


class OCRService:
    """
    Image-to-recipe extraction.
    Text recognition is mocked until a recognition backend is configured.
    """

    def __init__(self):
        self.max_image_size = settings.MAX_IMAGE_SIZE

    def validate_image(self, content_type: Optional[str], size: int):
        if not content_type or not content_type.startswith("image/"):
            raise ValueError("Please select a valid image file (PNG, JPG, JPEG)")
        if size > self.max_image_size:
            raise ValueError("Image file is too large. Please select an image smaller than 10MB.")

    async def extract_recipe_from_image(self, filename: str, content_type: Optional[str], size: int) -> ExtractedRecipe:
        self.validate_image(content_type, size)
        logger.info(f"Extracting recipe from image {filename} ({size} bytes)")

        return ExtractedRecipe(
            title="Imported Recipe",
            ingredients=[
                "2 cups flour",
                "1 cup sugar",
                "3 eggs",
                "1/2 cup milk",
                "1 tsp vanilla extract",
            ],
            instructions=[
                "Preheat oven to 350°F",
                "Mix dry ingredients in a large bowl",
                "Beat eggs and add to dry ingredients",
                "Add milk and vanilla, mix until smooth",
                "Pour into greased pan and bake for 30 minutes",
            ],
            cooking_time="30",
            servings="8",
            difficulty="Easy",
            raw_text="Mock recipe text extracted from image",
        )

    def to_imported_recipe(self, extracted: ExtractedRecipe) -> Dict[str, Any]:
        """Convert recognised text into the importable recipe shape"""
        return {
            "title": extracted.title or "Imported Recipe",
            "description": "",
            "source_url": None,
            "image_url": None,
            "prep_time": None,
            "cook_time": _to_int(extracted.cooking_time),
            "servings": _to_int(extracted.servings),
            "difficulty": extracted.difficulty,
            "cuisine": None,
            "tags": ["imported", "image"],
            "ingredients": [
                ingredient_parser.parse_ingredient_line(line).to_dict()
                for line in extracted.ingredients
                if line.strip()
            ],
            "instructions": list(extracted.instructions),
            "import_source": ImportSource.OCR.value,
        }


def _to_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value else None
    except ValueError:
        return None


# Global service instance
ocr_service = OCRService()
