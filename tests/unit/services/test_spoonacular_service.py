"""Unit tests for the Spoonacular catalogue client.

Tests cover:
- Mock catalogue fallback when no API key is configured
- Conversion of Spoonacular payloads
- Fallback when the API fails
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from services.spoonacular_service import SpoonacularService


@pytest.fixture
def mock_catalogue() -> SpoonacularService:
    service = SpoonacularService()
    service.api_key = "demo-key"
    return service


@pytest.fixture
def live_catalogue() -> SpoonacularService:
    service = SpoonacularService()
    service.api_key = "live-key"
    return service


class TestMockFallback:
    """Tests for the built-in catalogue."""

    def test_demo_key_disables_api(self, mock_catalogue) -> None:
        """Should treat the demo key as no key."""
        assert mock_catalogue.enabled is False

    async def test_search_matches_title_description_and_tags(self, mock_catalogue) -> None:
        """Should search the mock catalogue case-insensitively."""
        # Act
        response = await mock_catalogue.search_recipes(query="PASTA")

        # Assert
        ids = [recipe["id"] for recipe in response["results"]]
        assert response["source"] == "mock"
        assert "external-1" in ids
        assert "external-7" in ids
        assert response["total_results"] == len(ids)

    async def test_search_filters_by_ready_time(self, mock_catalogue) -> None:
        """Should keep recipes at or under the time limit."""
        response = await mock_catalogue.search_recipes(max_ready_time=15)

        assert [recipe["title"] for recipe in response["results"]] == ["Greek Salad"]

    async def test_search_paginates(self, mock_catalogue) -> None:
        """Should slice results by offset and number."""
        response = await mock_catalogue.search_recipes(offset=2, number=3)

        assert len(response["results"]) == 3
        assert response["results"][0]["id"] == "external-3"
        assert response["total_results"] == len(mock_catalogue.mock_recipes)

    async def test_get_recipe_information(self, mock_catalogue) -> None:
        """Should accept both prefixed and numeric ids."""
        assert (await mock_catalogue.get_recipe_information("external-3"))["title"] == "Greek Salad"
        assert (await mock_catalogue.get_recipe_information(3))["title"] == "Greek Salad"
        assert await mock_catalogue.get_recipe_information("external-999") is None

    async def test_random_filters_by_tag(self, mock_catalogue) -> None:
        """Should only draw recipes carrying a requested tag."""
        response = await mock_catalogue.get_random_recipes(number=5, tags="vegan")

        assert [recipe["title"] for recipe in response["results"]] == ["Vegan Lentil Soup"]

    async def test_find_by_ingredients_ranks_matches(self, mock_catalogue) -> None:
        """Should count used ingredients per recipe."""
        response = await mock_catalogue.find_by_ingredients(["Shrimp", " "])

        assert response["results"][0]["title"] == "Spicy Shrimp Tacos"
        assert response["results"][0]["used_ingredient_count"] == 1

    async def test_find_by_ingredients_without_matches(self, mock_catalogue) -> None:
        """Should return an empty result for unknown ingredients."""
        response = await mock_catalogue.find_by_ingredients(["durian"])

        assert response["results"] == []
        assert response["total_results"] == 0


class TestLiveCatalogue:
    """Tests for the API-backed path."""

    async def test_converts_api_search_results(self, live_catalogue) -> None:
        """Should map Spoonacular fields onto the external recipe shape."""
        # Arrange
        payload = {
            "results": [{
                "id": 716429,
                "title": "Pasta with Garlic",
                "summary": "<b>Tasty</b> pasta",
                "image": "https://img/716429.jpg",
                "readyInMinutes": 45,
                "servings": 2,
                "spoonacularScore": 90,
                "cuisines": ["Italian"],
                "dishTypes": ["main course"],
                "diets": [],
                "extendedIngredients": [
                    {"id": 1, "name": "garlic", "amount": 2, "unit": "cloves", "original": "2 cloves garlic"},
                ],
                "analyzedInstructions": [{"steps": [{"number": 1, "step": "Cook."}]}],
            }],
            "totalResults": 1,
        }

        # Act
        with patch.object(live_catalogue, "_make_request", AsyncMock(return_value=payload)):
            response = await live_catalogue.search_recipes(query="pasta")

        # Assert
        recipe = response["results"][0]
        assert response["source"] == "spoonacular"
        assert recipe["id"] == "external-716429"
        assert recipe["description"] == "Tasty pasta"
        assert recipe["difficulty"] == "Medium"
        assert recipe["rating"] == 4.5
        assert recipe["tags"] == ["Italian", "main course"]
        assert recipe["instructions"] == [{"number": 1, "step": "Cook."}]

    async def test_falls_back_to_mock_on_request_error(self, live_catalogue) -> None:
        """Should serve the mock catalogue when the API is unreachable."""
        failing = AsyncMock(side_effect=httpx.ConnectError("unreachable"))

        with patch.object(live_catalogue, "_make_request", failing):
            response = await live_catalogue.search_recipes(query="salad")

        failing.assert_awaited_once()
        assert response["source"] == "mock"
        assert response["results"][0]["title"] == "Greek Salad"

    async def test_unexpected_body_shape_falls_back(self, live_catalogue) -> None:
        """Should treat a list where an object is expected as a failed call."""
        with patch.object(live_catalogue, "_make_request", AsyncMock(return_value=[{"id": 1}])):
            response = await live_catalogue.search_recipes(query="salad")

        assert response["source"] == "mock"

    async def test_by_ingredients_rejects_object_body(self, live_catalogue) -> None:
        """Should fall back when the ingredient search does not return a list."""
        with patch.object(live_catalogue, "_make_request", AsyncMock(return_value={"status": "failure"})):
            response = await live_catalogue.find_by_ingredients(["tomato"])

        assert response["source"] == "mock"

    async def test_unknown_recipe_body_uses_mock_lookup(self, live_catalogue) -> None:
        """Should not crash on a non-object recipe body."""
        with patch.object(live_catalogue, "_make_request", AsyncMock(return_value="oops")):
            recipe = await live_catalogue.get_recipe_information("external-999999")

        assert recipe is None


class TestHelpers:
    """Tests for static helpers."""

    @pytest.mark.parametrize("minutes,expected", [(10, "Easy"), (15, "Easy"), (30, "Medium"), (46, "Hard")])
    def test_calculate_difficulty(self, minutes, expected) -> None:
        """Should bucket cooking times."""
        assert SpoonacularService.calculate_difficulty(minutes) == expected

    def test_strip_html_tags(self) -> None:
        """Should remove markup and entities."""
        assert SpoonacularService.strip_html_tags("<p>Hot &amp; fresh</p>") == "Hot  fresh"
