"""
Mealwise Spoonacular Service
External recipe catalogue with a built-in mock fallback
"""

import re
import random
import hashlib
import json
import logging
from typing import Dict, List, Optional, Any

import httpx

from core.config import get_settings
from core.redis import cache

settings = get_settings()
logger = logging.getLogger(__name__)

EXTERNAL_PREFIX = "external-"


def _mock_recipe(
    number: int,
    title: str,
    description: str,
    image: str,
    cooking_time: int,
    servings: int,
    difficulty: str,
    tags: List[str],
    rating: float,
    ingredients: List[tuple],
    instructions: List[str],
) -> Dict[str, Any]:
    return {
        "id": f"{EXTERNAL_PREFIX}{number}",
        "title": title,
        "description": description,
        "image_url": f"https://images.unsplash.com/{image}?w=400&h=300&fit=crop",
        "cooking_time": cooking_time,
        "servings": servings,
        "difficulty": difficulty,
        "tags": tags,
        "source": "external",
        "external_id": str(number),
        "external_source": "Spoonacular",
        "external_url": None,
        "rating": rating,
        "ingredients": [
            {
                "id": index + 1,
                "name": name,
                "amount": amount,
                "unit": unit,
                "original": f"{amount:g} {unit} {name}".replace("  ", " "),
            }
            for index, (amount, unit, name) in enumerate(ingredients)
        ],
        "instructions": [
            {"number": index + 1, "step": step}
            for index, step in enumerate(instructions)
        ],
    }


MOCK_EXTERNAL_RECIPES: List[Dict[str, Any]] = [
    _mock_recipe(
        1, "Spaghetti Carbonara",
        "Classic Italian pasta dish with eggs, cheese, and pancetta",
        "photo-1551183053-bf91a1d81141", 20, 4, "Medium", ["Italian", "Pasta", "Quick"], 4.5,
        [(400, "g", "spaghetti"), (150, "g", "pancetta"), (3, "piece", "eggs"),
         (1, "cup", "parmesan cheese"), (1, "tsp", "black pepper")],
        ["Cook the spaghetti in salted boiling water until al dente.",
         "Fry the pancetta until crisp.",
         "Whisk the eggs with the parmesan and pepper.",
         "Toss the hot pasta with the pancetta, then stir in the egg mixture off the heat."],
    ),
    _mock_recipe(
        2, "Chicken Tikka Masala",
        "Creamy and flavorful Indian curry with tender chicken",
        "photo-1565557623262-b51c2513a641", 45, 6, "Medium", ["Indian", "Curry", "Spicy"], 4.8,
        [(2, "pound", "chicken breast"), (1, "cup", "plain yogurt"), (1, "can", "tomato sauce"),
         (1, "cup", "heavy cream"), (2, "tbsp", "garam masala"), (1, "piece", "onion")],
        ["Marinate the chicken in yogurt and half the spices.",
         "Sear the chicken until browned.",
         "Soften the onion, add the remaining spices and the tomato sauce.",
         "Stir in the cream and chicken and simmer for 15 minutes."],
    ),
    _mock_recipe(
        3, "Greek Salad",
        "Fresh Mediterranean salad with olives, feta, and vegetables",
        "photo-1540420773420-3366772f4999", 10, 2, "Easy", ["Salad", "Healthy", "Vegetarian"], 4.2,
        [(2, "piece", "tomatoes"), (1, "piece", "cucumber"), (0.5, "cup", "kalamata olives"),
         (100, "g", "feta cheese"), (2, "tbsp", "olive oil")],
        ["Chop the tomatoes and cucumber.",
         "Add the olives and crumbled feta.",
         "Dress with olive oil and season to taste."],
    ),
    _mock_recipe(
        4, "Chocolate Chip Cookies",
        "Classic homemade chocolate chip cookies",
        "photo-1499636136210-6f4ee915583e", 30, 24, "Easy", ["Dessert", "Baking", "Cookies"], 4.6,
        [(2.25, "cup", "all-purpose flour"), (1, "cup", "butter"), (0.75, "cup", "brown sugar"),
         (2, "piece", "eggs"), (2, "cup", "chocolate chips"), (1, "tsp", "vanilla extract")],
        ["Cream the butter and sugar.",
         "Beat in the eggs and vanilla.",
         "Mix in the flour, then fold in the chocolate chips.",
         "Bake at 375°F for 10 to 12 minutes."],
    ),
    _mock_recipe(
        5, "Vegan Lentil Soup",
        "Hearty and healthy vegan lentil soup, perfect for a cold day.",
        "photo-1590940102956-02121122129b", 40, 6, "Medium", ["Vegan", "Soup", "Healthy", "Winter"], 4.3,
        [(1.5, "cup", "brown lentils"), (1, "piece", "onion"), (2, "piece", "carrots"),
         (6, "cup", "vegetable broth"), (1, "tsp", "cumin")],
        ["Saute the onion and carrots until soft.",
         "Add the lentils, broth and cumin.",
         "Simmer for 30 minutes until the lentils are tender."],
    ),
    _mock_recipe(
        6, "Spicy Shrimp Tacos",
        "Quick and flavorful shrimp tacos with a spicy kick.",
        "photo-1599974579688-8dbdd335c77f", 25, 2, "Easy", ["Mexican", "Seafood", "Spicy", "Tacos"], 4.7,
        [(1, "pound", "shrimp"), (6, "piece", "corn tortillas"), (1, "tsp", "chili powder"),
         (1, "cup", "shredded cabbage"), (1, "piece", "lime")],
        ["Season the shrimp with chili powder.",
         "Cook the shrimp for 2 minutes per side.",
         "Warm the tortillas and fill with shrimp, cabbage and a squeeze of lime."],
    ),
    _mock_recipe(
        7, "Classic Beef Lasagna",
        "Layers of pasta, rich meat sauce, and creamy cheese.",
        "photo-1619895092938-1247891d9129", 90, 8, "Hard", ["Italian", "Pasta", "Comfort Food"], 4.9,
        [(1, "pound", "ground beef"), (12, "piece", "lasagna noodles"), (3, "cup", "marinara sauce"),
         (2, "cup", "ricotta cheese"), (2, "cup", "mozzarella cheese")],
        ["Brown the beef and stir in the marinara sauce.",
         "Boil the noodles until just tender.",
         "Layer noodles, sauce, ricotta and mozzarella in a baking dish.",
         "Bake at 375°F for 45 minutes."],
    ),
    _mock_recipe(
        8, "Blueberry Pancakes",
        "Fluffy pancakes loaded with fresh blueberries.",
        "photo-1528207776546-367ee310272f", 20, 4, "Easy", ["Breakfast", "Sweet", "Pancakes"], 4.4,
        [(1.5, "cup", "all-purpose flour"), (1.25, "cup", "milk"), (1, "piece", "egg"),
         (1, "tbsp", "baking powder"), (1, "cup", "blueberries")],
        ["Whisk the dry ingredients together.",
         "Add the milk and egg and stir until just combined.",
         "Fold in the blueberries and cook on a hot griddle."],
    ),
    _mock_recipe(
        9, "Roasted Chicken with Vegetables",
        "A simple and delicious roasted chicken with root vegetables.",
        "photo-1598103442092-4377432205f2", 60, 4, "Medium", ["Dinner", "Healthy", "Roast"], 4.6,
        [(1, "piece", "whole chicken"), (4, "piece", "potatoes"), (3, "piece", "carrots"),
         (2, "tbsp", "olive oil"), (1, "tbsp", "rosemary")],
        ["Heat the oven to 425°F.",
         "Toss the vegetables in oil and spread them in a roasting pan.",
         "Season the chicken, set it on the vegetables and roast for 1 hour."],
    ),
    _mock_recipe(
        10, "Vegetable Stir-fry",
        "Quick and versatile stir-fry with your favorite vegetables.",
        "photo-1546069901-ba9599a7e63c", 20, 3, "Easy", ["Asian", "Vegetarian", "Quick"], 4.1,
        [(2, "cup", "broccoli florets"), (1, "piece", "bell pepper"), (1, "cup", "snap peas"),
         (3, "tbsp", "soy sauce"), (1, "tbsp", "sesame oil")],
        ["Heat the sesame oil in a wok.",
         "Stir-fry the vegetables for 5 minutes.",
         "Add the soy sauce and toss to coat."],
    ),
    _mock_recipe(
        11, "Salmon with Asparagus",
        "Healthy baked salmon with tender asparagus.",
        "photo-1519708241834-a97869327f2c", 30, 2, "Easy", ["Healthy", "Seafood", "Dinner"], 4.7,
        [(2, "piece", "salmon fillets"), (1, "bunch", "asparagus"), (1, "piece", "lemon"),
         (2, "tbsp", "olive oil")],
        ["Heat the oven to 400°F.",
         "Arrange the salmon and asparagus on a sheet pan and drizzle with oil.",
         "Bake for 15 minutes and finish with lemon juice."],
    ),
    _mock_recipe(
        12, "Classic Margherita Pizza",
        "Simple and delicious pizza with fresh mozzarella and basil.",
        "photo-1593560704563-f176a2d61e0c", 25, 4, "Medium", ["Italian", "Pizza", "Vegetarian"], 4.5,
        [(1, "piece", "pizza dough"), (0.5, "cup", "tomato sauce"), (200, "g", "fresh mozzarella"),
         (10, "piece", "basil leaves")],
        ["Stretch the dough onto a floured tray.",
         "Spread the sauce and top with torn mozzarella.",
         "Bake at 475°F for 12 minutes and scatter with basil."],
    ),
]


class SpoonacularService:
    """Spoonacular recipe API client; falls back to the mock catalogue"""

    def __init__(self):
        self.api_key = settings.SPOONACULAR_API_KEY
        self.base_url = settings.SPOONACULAR_BASE_URL
        self.timeout = settings.SPOONACULAR_TIMEOUT
        self.mock_recipes = MOCK_EXTERNAL_RECIPES

    @property
    def enabled(self) -> bool:
        return bool(self.api_key) and self.api_key != "demo-key"

    async def _make_request(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """GET a catalogue endpoint, cached in Redis"""
        query = {key: value for key, value in params.items() if value is not None}
        cache_key = hashlib.sha256(
            f"{endpoint}:{json.dumps(query, sort_keys=True, default=str)}".encode()
        ).hexdigest()

        cached = await cache.get_json(cache_key, namespace="spoonacular")
        if cached is not None:
            return cached

        request_params = {key: str(value).lower() if isinstance(value, bool) else value for key, value in query.items()}
        request_params["apiKey"] = self.api_key

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(f"{self.base_url}{endpoint}", params=request_params)
            response.raise_for_status()
            data = response.json()

        await cache.set_json(cache_key, data, ttl=settings.CACHE_TTL_MEDIUM, namespace="spoonacular")
        return data

    async def _request_or_none(self, endpoint: str, params: Dict[str, Any], expected: type = dict) -> Optional[Any]:
        """Catalogue response, or None when disabled, failing or not shaped as expected"""
        if not self.enabled:
            return None
        try:
            data = await self._make_request(endpoint, params)
        except httpx.HTTPStatusError as e:
            logger.error(f"Spoonacular API HTTP error {e.response.status_code} for {endpoint}")
            return None
        except httpx.RequestError as e:
            logger.error(f"Spoonacular API request failed for {endpoint}: {str(e)}")
            return None
        except ValueError as e:
            logger.error(f"Spoonacular API returned invalid JSON for {endpoint}: {str(e)}")
            return None

        if not isinstance(data, expected):
            logger.error(f"Spoonacular API returned {type(data).__name__} for {endpoint}, expected {expected.__name__}")
            return None
        return data

    async def search_recipes(
        self,
        query: Optional[str] = None,
        cuisine: Optional[str] = None,
        diet: Optional[str] = None,
        max_ready_time: Optional[int] = None,
        offset: int = 0,
        number: int = 20,
    ) -> Dict[str, Any]:
        """Search the catalogue"""
        data = await self._request_or_none("/complexSearch", {
            "query": query,
            "cuisine": cuisine,
            "diet": diet,
            "maxReadyTime": max_ready_time,
            "addRecipeInformation": True,
            "fillIngredients": True,
            "addRecipeNutrition": True,
            "offset": offset,
            "number": number,
        })

        if data is not None:
            results = [self.convert_to_internal_recipe(raw) for raw in data.get("results", []) if isinstance(raw, dict)]
            return self._response(results, data.get("totalResults", len(results)), offset, number, "spoonacular")

        matches = self.search_mock_recipes(query, cuisine, diet, max_ready_time)
        return self._response(matches[offset:offset + number], len(matches), offset, number, "mock")

    async def get_recipe_information(self, recipe_id) -> Optional[Dict[str, Any]]:
        """Single catalogue recipe by numeric or 'external-{n}' id"""
        numeric_id = str(recipe_id)
        if numeric_id.startswith(EXTERNAL_PREFIX):
            numeric_id = numeric_id[len(EXTERNAL_PREFIX):]

        data = await self._request_or_none(f"/{numeric_id}/information", {
            "includeNutrition": False,
        })
        if data is not None:
            return self.convert_to_internal_recipe(data)

        return self.get_mock_recipe(f"{EXTERNAL_PREFIX}{numeric_id}")

    async def get_random_recipes(self, number: int = 10, tags: Optional[str] = None) -> Dict[str, Any]:
        data = await self._request_or_none("/random", {"number": number, "tags": tags})
        if data is not None:
            results = [self.convert_to_internal_recipe(raw) for raw in data.get("recipes", []) if isinstance(raw, dict)]
            return self._response(results, len(results), 0, number, "spoonacular")

        pool = self.mock_recipes
        if tags:
            wanted = [tag.strip().lower() for tag in tags.split(",") if tag.strip()]
            pool = [recipe for recipe in pool if self._has_tags(recipe, wanted)]
        results = random.sample(pool, min(number, len(pool)))
        return self._response(results, len(results), 0, number, "mock")

    async def find_by_ingredients(self, ingredients: List[str], number: int = 20) -> Dict[str, Any]:
        """Recipes that use the given ingredients"""
        wanted = [name.strip().lower() for name in ingredients if name and name.strip()]

        data = await self._request_or_none("/findByIngredients", {
            "ingredients": ",".join(wanted),
            "number": number,
            "ranking": 2,
            "ignorePantry": True,
        }, expected=list)
        if data is not None:
            results = [self._convert_ingredient_match(raw) for raw in data if isinstance(raw, dict)]
            return self._response(results, len(results), 0, number, "spoonacular")

        scored = []
        for recipe in self.mock_recipes:
            names = [ingredient["name"].lower() for ingredient in recipe["ingredients"]]
            used = sum(1 for item in wanted if any(item in name for name in names))
            if used:
                scored.append((used, recipe))
        scored.sort(key=lambda pair: pair[0], reverse=True)
        results = [dict(recipe, used_ingredient_count=used) for used, recipe in scored[:number]]
        return self._response(results, len(scored), 0, number, "mock")

    def search_mock_recipes(
        self,
        query: Optional[str] = None,
        cuisine: Optional[str] = None,
        diet: Optional[str] = None,
        max_ready_time: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        results = self.mock_recipes

        if query:
            needle = query.lower()
            results = [
                recipe for recipe in results
                if needle in recipe["title"].lower()
                or needle in recipe["description"].lower()
                or any(needle in tag.lower() for tag in recipe["tags"])
            ]
        if cuisine:
            results = [recipe for recipe in results if self._has_tags(recipe, [cuisine.lower()])]
        if diet:
            results = [recipe for recipe in results if self._has_tags(recipe, [diet.lower()])]
        if max_ready_time:
            results = [recipe for recipe in results if recipe["cooking_time"] <= max_ready_time]

        return list(results)

    def get_mock_recipe(self, recipe_id: str) -> Optional[Dict[str, Any]]:
        for recipe in self.mock_recipes:
            if recipe["id"] == recipe_id:
                return recipe
        return None

    def convert_to_internal_recipe(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Map a Spoonacular recipe payload to the internal external-recipe shape"""
        ready_in = raw.get("readyInMinutes") or 0
        score = raw.get("spoonacularScore") or 0

        steps = []
        for block in raw.get("analyzedInstructions") or []:
            for step in block.get("steps", []):
                steps.append({"number": step.get("number", len(steps) + 1), "step": step.get("step", "")})

        return {
            "id": f"{EXTERNAL_PREFIX}{raw.get('id')}",
            "title": raw.get("title", ""),
            "description": self.strip_html_tags(raw.get("summary") or ""),
            "image_url": raw.get("image"),
            "cooking_time": ready_in,
            "servings": raw.get("servings") or 1,
            "difficulty": self.calculate_difficulty(ready_in),
            "tags": [tag for tag in (raw.get("cuisines") or []) + (raw.get("dishTypes") or []) + (raw.get("diets") or []) if tag],
            "source": "external",
            "external_id": str(raw.get("id")),
            "external_source": "Spoonacular",
            "external_url": raw.get("sourceUrl"),
            "rating": round(score / 100 * 5, 1),
            "ingredients": [
                {
                    "id": ingredient.get("id"),
                    "name": ingredient.get("name", ""),
                    "amount": ingredient.get("amount", 0),
                    "unit": ingredient.get("unit", ""),
                    "original": ingredient.get("original", ""),
                }
                for ingredient in raw.get("extendedIngredients") or []
            ],
            "instructions": steps,
        }

    def _convert_ingredient_match(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": f"{EXTERNAL_PREFIX}{raw.get('id')}",
            "title": raw.get("title", ""),
            "image_url": raw.get("image"),
            "source": "external",
            "external_id": str(raw.get("id")),
            "external_source": "Spoonacular",
            "used_ingredient_count": raw.get("usedIngredientCount", 0),
            "missed_ingredient_count": raw.get("missedIngredientCount", 0),
        }

    @staticmethod
    def strip_html_tags(html: str) -> str:
        return re.sub(r"&[^;\s]+;", "", re.sub(r"<[^>]*>", "", html))

    @staticmethod
    def calculate_difficulty(cooking_time: int) -> str:
        if cooking_time <= 15:
            return "Easy"
        if cooking_time <= 45:
            return "Medium"
        return "Hard"

    @staticmethod
    def _has_tags(recipe: Dict[str, Any], wanted: List[str]) -> bool:
        tags = [tag.lower() for tag in recipe["tags"]]
        return any(tag in tags for tag in wanted)

    @staticmethod
    def _response(results: List[Dict[str, Any]], total: int, offset: int, number: int, source: str) -> Dict[str, Any]:
        return {
            "results": results,
            "total_results": total,
            "offset": offset,
            "number": number,
            "source": source,
        }


# Global service instance
spoonacular_service = SpoonacularService()
