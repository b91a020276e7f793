"""
Mealwise URL Import Service
Recipe extraction from web pages: JSON-LD first, then microdata, then common selectors
"""

import re
import json
import logging
from typing import Dict, List, Optional, Any
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

import httpx
from bs4 import BeautifulSoup

from models.recipe_models import ImportSource
from services.ingredient_parser import ingredient_parser

logger = logging.getLogger(__name__)

TRACKING_PARAMS = {"fbclid", "gclid", "msclkid", "mc_cid", "mc_eid", "ref", "referrer"}

FETCH_TIMEOUT = 15.0
USER_AGENT = "Mozilla/5.0 (compatible; MealwiseRecipeImporter/1.0)"

ISO_DURATION = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?", re.IGNORECASE)
HOURS_PATTERN = re.compile(r"(\d+)\s*(?:hours?|hrs?|h)\b", re.IGNORECASE)
MINUTES_PATTERN = re.compile(r"(\d+)\s*(?:minutes?|mins?|m)\b", re.IGNORECASE)

SELECTORS = {
    "title": ['[itemprop="name"]', ".recipe-title", ".wprm-recipe-name", ".entry-title", "h1"],
    "description": ['[itemprop="description"]', ".recipe-summary", ".wprm-recipe-summary", 'meta[name="description"]'],
    "ingredients": [
        '[itemprop="recipeIngredient"]',
        '[itemprop="ingredients"]',
        ".wprm-recipe-ingredient",
        ".recipe-ingredients li",
        "ul.ingredients li",
        ".ingredients li",
    ],
    "instructions": [
        '[itemprop="recipeInstructions"] li',
        '[itemprop="recipeInstructions"]',
        ".wprm-recipe-instruction-text",
        ".recipe-instructions li",
        ".instructions li",
        ".directions li",
        ".method li",
    ],
    "prep_time": ['[itemprop="prepTime"]', ".prep-time", ".wprm-recipe-prep_time-container"],
    "cook_time": ['[itemprop="cookTime"]', ".cook-time", ".wprm-recipe-cook_time-container"],
    "servings": ['[itemprop="recipeYield"]', ".servings", ".wprm-recipe-servings", '[class*="serving"]'],
}

FALLBACK_INGREDIENTS = [
    {"quantity": 2, "unit": "cup", "name": "all-purpose flour", "notes": "sifted"},
    {"quantity": 1, "unit": "cup", "name": "butter", "notes": "softened"},
    {"quantity": 0.75, "unit": "cup", "name": "granulated sugar", "notes": ""},
    {"quantity": 2, "unit": "piece", "name": "eggs", "notes": "room temperature"},
    {"quantity": 1, "unit": "teaspoon", "name": "vanilla extract", "notes": ""},
    {"quantity": 0.5, "unit": "teaspoon", "name": "salt", "notes": ""},
]

FALLBACK_INSTRUCTIONS = [
    "Preheat oven to 350°F (175°C)",
    "Prepare all ingredients as specified",
    "Follow recipe instructions carefully",
    "Bake until done, checking for doneness",
    "Let cool before serving",
]


class URLImportService:
    """Fetches a recipe page and turns it into an importable recipe"""

    async def import_from_url(self, url: str) -> Dict[str, Any]:
        """
        Scrape a recipe from a URL

        Never raises for fetch or parse problems; a fallback recipe tagged
        'fallback' is returned instead so the user can edit it.
        """
        try:
            clean_url = self.clean_url(url)
        except ValueError:
            clean_url = url.strip()
        logger.info(f"Importing recipe from {clean_url}")

        try:
            html = await self.fetch_html(clean_url)
            recipe = self.parse_recipe_html(html, clean_url)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, AttributeError, TypeError) as e:
            logger.warning(f"Recipe scraping failed for {clean_url}: {str(e)}")
            return self.build_fallback_recipe(clean_url)

        logger.info(
            f"Imported '{recipe['title']}' with {len(recipe['ingredients'])} ingredients "
            f"and {len(recipe['instructions'])} steps"
        )
        return recipe

    async def fetch_html(self, url: str) -> str:
        async with httpx.AsyncClient(
            timeout=FETCH_TIMEOUT,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            response = await client.get(url)
            response.raise_for_status()

            content_type = response.headers.get("content-type", "").lower()
            if "html" not in content_type:
                raise ValueError(f"Non-HTML content type: {content_type}")

            return response.text

    def parse_recipe_html(self, html: str, url: str) -> Dict[str, Any]:
        """Parse a recipe page; raises ValueError when nothing usable is found"""
        soup = BeautifulSoup(html, "html.parser")

        data = self._parse_json_ld(soup) or self._parse_selectors(soup)
        if not data.get("ingredients") and not data.get("instructions"):
            raise ValueError("No recipe data found on page")

        ingredients = [
            ingredient_parser.parse_ingredient_line(line).to_dict()
            for line in data.get("ingredients", [])
            if line and line.strip()
        ]

        tags = ["imported", "url"]
        for tag in data.get("tags", []):
            if tag and tag.lower() not in [existing.lower() for existing in tags]:
                tags.append(tag)

        return {
            "title": (data.get("title") or "").strip() or self.extract_title_from_url(url),
            "description": data.get("description") or "",
            "source_url": url,
            "image_url": data.get("image_url"),
            "prep_time": self.parse_time(data.get("prep_time")),
            "cook_time": self.parse_time(data.get("cook_time")),
            "servings": self._parse_servings(data.get("servings")),
            "difficulty": None,
            "cuisine": data.get("cuisine"),
            "tags": tags,
            "ingredients": ingredients,
            "instructions": data.get("instructions", []),
            "import_source": ImportSource.URL.value,
        }

    def _parse_json_ld(self, soup: BeautifulSoup) -> Optional[Dict[str, Any]]:
        for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
            try:
                payload = json.loads(script.string or script.get_text() or "")
            except json.JSONDecodeError:
                continue

            node = self._find_recipe_node(payload)
            if node:
                return {
                    "title": self._text(self._first(node.get("name"))),
                    "description": self._text(self._first(node.get("description"))),
                    "image_url": self._image_url(node.get("image")),
                    "prep_time": self._first(node.get("prepTime")),
                    "cook_time": self._first(node.get("cookTime")),
                    "servings": node.get("recipeYield"),
                    "cuisine": self._text(self._first(node.get("recipeCuisine"))) or None,
                    "tags": self._keywords(node.get("keywords")) + self._keywords(node.get("recipeCategory")),
                    "ingredients": [self._text(item) for item in self._as_list(node.get("recipeIngredient"))],
                    "instructions": self._instructions(node.get("recipeInstructions")),
                }
        return None

    def _find_recipe_node(self, payload: Any) -> Optional[Dict[str, Any]]:
        if isinstance(payload, list):
            for item in payload:
                node = self._find_recipe_node(item)
                if node:
                    return node
            return None

        if not isinstance(payload, dict):
            return None

        node_type = payload.get("@type")
        types = node_type if isinstance(node_type, list) else [node_type]
        if "Recipe" in types:
            return payload

        if "@graph" in payload:
            return self._find_recipe_node(payload["@graph"])
        return None

    def _instructions(self, value: Any) -> List[str]:
        steps = []
        for item in self._as_list(value):
            if isinstance(item, str):
                steps.extend(line.strip() for line in re.split(r"\n+", self._text(item)) if line.strip())
            elif isinstance(item, dict):
                if item.get("@type") == "HowToSection" or "itemListElement" in item:
                    steps.extend(self._instructions(item.get("itemListElement")))
                else:
                    text = self._text(item.get("text") or item.get("name"))
                    if text:
                        steps.append(text)
        return steps

    def _parse_selectors(self, soup: BeautifulSoup) -> Dict[str, Any]:
        """Microdata and common recipe-plugin class names"""
        return {
            "title": self._select_text(soup, SELECTORS["title"]),
            "description": self._select_text(soup, SELECTORS["description"]),
            "image_url": self._meta_content(soup, "og:image"),
            "prep_time": self._select_time(soup, SELECTORS["prep_time"]),
            "cook_time": self._select_time(soup, SELECTORS["cook_time"]),
            "servings": self._select_text(soup, SELECTORS["servings"]),
            "cuisine": None,
            "tags": [],
            "ingredients": self._select_list(soup, SELECTORS["ingredients"]),
            "instructions": self._select_list(soup, SELECTORS["instructions"]),
        }

    def _select_text(self, soup: BeautifulSoup, selectors: List[str]) -> Optional[str]:
        for selector in selectors:
            element = soup.select_one(selector)
            if not element:
                continue
            text = element.get("content", "").strip() if element.name == "meta" else element.get_text(" ", strip=True)
            if text:
                return text
        return None

    def _select_time(self, soup: BeautifulSoup, selectors: List[str]) -> Optional[str]:
        for selector in selectors:
            element = soup.select_one(selector)
            if element:
                return element.get("content") or element.get("datetime") or element.get_text(" ", strip=True)
        return None

    def _select_list(self, soup: BeautifulSoup, selectors: List[str]) -> List[str]:
        for selector in selectors:
            items = [element.get_text(" ", strip=True) for element in soup.select(selector)]
            items = [item for item in items if len(item) > 2]
            if items:
                return items
        return []

    def _meta_content(self, soup: BeautifulSoup, prop: str) -> Optional[str]:
        element = soup.find("meta", attrs={"property": prop})
        return element.get("content") if element else None

    def parse_time(self, value: Any) -> Optional[int]:
        """Minutes from 'PT1H30M', '1 hour', '25 mins' or a bare number"""
        if value is None or value == "":
            return None
        if isinstance(value, (int, float)):
            return int(value)

        text = str(value).strip()
        iso = ISO_DURATION.search(text)
        if iso and (iso.group(1) or iso.group(2)):
            return int(iso.group(1) or 0) * 60 + int(iso.group(2) or 0)

        hours = HOURS_PATTERN.search(text)
        minutes = MINUTES_PATTERN.search(text)
        if hours or minutes:
            return (int(hours.group(1)) * 60 if hours else 0) + (int(minutes.group(1)) if minutes else 0)

        number = re.search(r"\d+", text)
        return int(number.group(0)) if number else None

    def _parse_servings(self, value: Any) -> Optional[int]:
        value = self._first(value)
        if value is None:
            return None
        if isinstance(value, (int, float)):
            return int(value)
        match = re.search(r"\d+", str(value))
        return int(match.group(0)) if match else None

    @staticmethod
    def clean_url(url: str) -> str:
        """Drop tracking parameters, the fragment and a trailing slash"""
        parsed = urlparse(url.strip())
        query = [
            (key, value) for key, value in parse_qsl(parsed.query, keep_blank_values=True)
            if not key.lower().startswith("utm_") and key.lower() not in TRACKING_PARAMS
        ]
        path = parsed.path
        if path.endswith("/") and path != "/":
            path = path[:-1]
        return urlunparse((parsed.scheme, parsed.netloc, path, parsed.params, urlencode(query), ""))

    @staticmethod
    def extract_title_from_url(url: str) -> str:
        try:
            path = urlparse(url).path
        except ValueError:
            return "Imported Recipe"

        parts = [part for part in path.split("/") if part]
        if not parts:
            return "Imported Recipe"

        title = re.sub(r"\.(html?|php|aspx?)$", "", parts[-1], flags=re.IGNORECASE)
        title = re.sub(r"[-_]+", " ", title).strip()
        return " ".join(word.capitalize() for word in title.split()) or "Imported Recipe"

    def build_fallback_recipe(self, url: str) -> Dict[str, Any]:
        """Editable placeholder returned when a page cannot be scraped"""
        return {
            "title": self.extract_title_from_url(url),
            "description": f"Failed to scrape recipe from {url}. Please review and edit the details.",
            "source_url": url,
            "image_url": None,
            "prep_time": 15,
            "cook_time": 25,
            "servings": 12,
            "difficulty": "medium",
            "cuisine": "American",
            "tags": ["imported", "url", "fallback"],
            "ingredients": [dict(item) for item in FALLBACK_INGREDIENTS],
            "instructions": list(FALLBACK_INSTRUCTIONS),
            "import_source": ImportSource.URL.value,
        }

    @staticmethod
    def _as_list(value: Any) -> List[Any]:
        if value is None:
            return []
        return value if isinstance(value, list) else [value]

    def _first(self, value: Any) -> Any:
        items = self._as_list(value)
        return items[0] if items else None

    def _keywords(self, value: Any) -> List[str]:
        if isinstance(value, str):
            return [keyword.strip() for keyword in value.split(",") if keyword.strip()]
        return [str(keyword).strip() for keyword in self._as_list(value) if isinstance(keyword, (str, int, float))]

    @staticmethod
    def _text(value: Any) -> str:
        if value is None:
            return ""
        return BeautifulSoup(str(value), "html.parser").get_text(" ", strip=True)

    def _image_url(self, value: Any) -> Optional[str]:
        image = self._first(value)
        if isinstance(image, dict):
            image = image.get("url")
        return image if isinstance(image, str) else None


# Global service instance
url_import_service = URLImportService()
