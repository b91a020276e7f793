"""Unit tests for RecipeService against an in-memory database.

Tests cover:
- Recipe creation, lookup, update and deletion
- Ownership and visibility rules
- Search
- External id backfill
- Saved recipe bookmarks
"""

from unittest.mock import AsyncMock, patch

import pytest

from services.recipe_service import recipe_service


class TestCreateRecipe:
    """Tests for create_recipe."""

    async def test_creates_recipe_with_ingredients(self, db_session, user, pasta_recipe_data) -> None:
        """Should persist the recipe and its ordered ingredients."""
        # Act
        recipe = await recipe_service.create_recipe(user, pasta_recipe_data, db_session)

        # Assert
        assert recipe.id is not None
        assert recipe.user_id == user.id
        assert recipe.import_source == "manual"
        assert [ri.name for ri in recipe.ingredients] == ["pasta", "tomato", "olive oil"]
        assert recipe.ingredients[1].notes == "ripe"
        assert recipe.total_time == 30

    async def test_shares_ingredient_rows_between_recipes(self, db_session, user, pasta_recipe_data) -> None:
        """Should reuse an existing ingredient by lowercase name."""
        first = await recipe_service.create_recipe(user, pasta_recipe_data, db_session)
        second = await recipe_service.create_recipe(
            user,
            {"title": "Tomato Salad", "ingredients": [{"name": "TOMATO", "quantity": 2}]},
            db_session,
        )

        assert second.ingredients[0].ingredient_id == first.ingredients[1].ingredient_id
        assert second.ingredients[0].unit == "piece"

    async def test_blank_title_raises(self, db_session, user) -> None:
        """Should reject a recipe without a title."""
        with pytest.raises(ValueError, match="title"):
            await recipe_service.create_recipe(user, {"title": "   "}, db_session)

    async def test_unknown_import_source_raises(self, db_session, user) -> None:
        """Should reject import sources outside the known set."""
        with pytest.raises(ValueError, match="import source"):
            await recipe_service.create_recipe(user, {"title": "Soup", "import_source": "fax"}, db_session)

    async def test_ingredient_without_name_raises(self, db_session, user) -> None:
        """Should reject nameless ingredients."""
        with pytest.raises(ValueError, match="Ingredient name"):
            await recipe_service.create_recipe(
                user, {"title": "Soup", "ingredients": [{"name": "", "quantity": 1}]}, db_session
            )


class TestGetRecipe:
    """Tests for recipe lookups and visibility."""

    async def test_owner_can_read_private_recipe(self, db_session, user, pasta_recipe) -> None:
        """Should return the recipe to its owner."""
        found = await recipe_service.get_recipe_by_id(pasta_recipe.id, db_session, user=user)

        assert found is pasta_recipe

    async def test_other_user_cannot_read_private_recipe(self, db_session, other_user, pasta_recipe) -> None:
        """Should hide private recipes from other users."""
        assert await recipe_service.get_recipe_by_id(pasta_recipe.id, db_session, user=other_user) is None

    async def test_public_recipe_is_visible_to_anyone(self, db_session, user, pasta_recipe_data) -> None:
        """Should show public recipes without a user."""
        recipe = await recipe_service.create_recipe(user, {**pasta_recipe_data, "is_public": True}, db_session)

        assert await recipe_service.get_recipe_by_id(recipe.id, db_session) is recipe
        assert await recipe_service.get_public_recipes(db_session) == [recipe]

    async def test_missing_recipe_returns_none(self, db_session, user) -> None:
        """Should return None for unknown ids."""
        assert await recipe_service.get_recipe_by_id(9999, db_session, user=user) is None

    async def test_user_recipes_only_include_own(self, db_session, user, other_user, pasta_recipe) -> None:
        """Should list recipes per owner."""
        await recipe_service.create_recipe(other_user, {"title": "Other"}, db_session)

        recipes = await recipe_service.get_user_recipes(user, db_session)

        assert [recipe.id for recipe in recipes] == [pasta_recipe.id]


class TestUpdateAndDelete:
    """Tests for update_recipe and delete_recipe."""

    async def test_update_patches_given_fields(self, db_session, user, pasta_recipe) -> None:
        """Should only change provided fields."""
        updated = await recipe_service.update_recipe(
            user, pasta_recipe.id, {"title": "Sunday Pasta", "servings": 4}, db_session
        )

        assert updated.title == "Sunday Pasta"
        assert updated.servings == 4
        assert updated.description == "Quick tomato pasta"
        assert len(updated.ingredients) == 3

    async def test_update_replaces_ingredients(self, db_session, user, pasta_recipe) -> None:
        """Should replace the ingredient list when one is given."""
        updated = await recipe_service.update_recipe(
            user, pasta_recipe.id, {"ingredients": [{"name": "Basil", "quantity": 1, "unit": "bunch"}]}, db_session
        )

        assert [ri.name for ri in updated.ingredients] == ["basil"]

    async def test_update_blank_title_raises(self, db_session, user, pasta_recipe) -> None:
        """Should refuse to blank out the title."""
        with pytest.raises(ValueError):
            await recipe_service.update_recipe(user, pasta_recipe.id, {"title": " "}, db_session)

    async def test_update_by_non_owner_returns_none(self, db_session, other_user, pasta_recipe) -> None:
        """Should not let other users edit."""
        assert await recipe_service.update_recipe(other_user, pasta_recipe.id, {"title": "Mine"}, db_session) is None

    async def test_delete_owned_recipe(self, db_session, user, pasta_recipe) -> None:
        """Should delete and report success."""
        recipe_id = pasta_recipe.id

        assert await recipe_service.delete_recipe(user, recipe_id, db_session) is True
        assert await recipe_service.get_recipe_by_id(recipe_id, db_session, user=user) is None

    async def test_delete_by_non_owner_returns_false(self, db_session, other_user, pasta_recipe) -> None:
        """Should leave other users' recipes alone."""
        assert await recipe_service.delete_recipe(other_user, pasta_recipe.id, db_session) is False


class TestSearchRecipes:
    """Tests for search_recipes."""

    @pytest.mark.parametrize("query", ["pasta", "TOMATO", "quick"])
    async def test_matches_title_description_or_tag(self, db_session, user, pasta_recipe, query) -> None:
        """Should match case-insensitively across fields."""
        results = await recipe_service.search_recipes(user, query, db_session)

        assert results == [pasta_recipe]

    async def test_tag_match_is_exact(self, db_session, user) -> None:
        """Should not match partial tags."""
        recipe = await recipe_service.create_recipe(user, {"title": "Dal", "tags": ["vegetarian"]}, db_session)

        assert await recipe_service.search_recipes(user, "vegetarian", db_session) == [recipe]
        assert await recipe_service.search_recipes(user, "veg", db_session) == []

    async def test_empty_query_returns_all(self, db_session, user, pasta_recipe) -> None:
        """Should return every recipe for a blank query."""
        assert await recipe_service.search_recipes(user, "  ", db_session) == [pasta_recipe]


class TestExternalIds:
    """Tests for external id backfill."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://spoonacular.com/recipes/716429", "spoonacular-716429"),
            ("https://cook.blogspot.com/2020/01/best-soup.html", "blog-best-soup"),
            ("https://example.com/recipe", None),
            (None, None),
        ],
    )
    def test_external_id_from_url(self, url, expected) -> None:
        """Should derive ids for known sources only."""
        assert recipe_service.external_id_from_url(url) == expected

    async def test_update_external_ids(self, db_session, user) -> None:
        """Should backfill only recipes with a recognised source url."""
        # Arrange
        matched = await recipe_service.create_recipe(
            user, {"title": "Spoon", "source_url": "https://spoonacular.com/recipes/42"}, db_session
        )
        await recipe_service.create_recipe(
            user, {"title": "Elsewhere", "source_url": "https://example.com/x"}, db_session
        )

        # Act
        result = await recipe_service.update_external_ids(user, db_session)

        # Assert
        assert result == {"updated_count": 1, "recipe_ids": [matched.id]}
        assert matched.external_id == "spoonacular-42"


class TestSavedRecipes:
    """Tests for saved recipe bookmarks."""

    async def test_save_local_recipe_resolves_title(self, db_session, user, pasta_recipe) -> None:
        """Should look up the title for local recipes."""
        saved = await recipe_service.save_recipe(user, str(pasta_recipe.id), db_session)

        assert saved.title == "Weeknight Pasta"
        assert saved.is_external is False

    async def test_save_twice_is_idempotent(self, db_session, user, pasta_recipe) -> None:
        """Should return the existing bookmark."""
        first = await recipe_service.save_recipe(user, pasta_recipe.id, db_session)
        second = await recipe_service.save_recipe(user, pasta_recipe.id, db_session)

        assert first.id == second.id

    async def test_save_unknown_recipe_raises(self, db_session, user) -> None:
        """Should reject ids that resolve to nothing."""
        with pytest.raises(ValueError, match="Recipe not found"):
            await recipe_service.save_recipe(user, "9999", db_session)

    async def test_save_external_with_title_skips_lookup(self, db_session, user) -> None:
        """Should trust the provided title for catalogue recipes."""
        with patch("services.recipe_service.spoonacular_service") as mock_catalogue:
            mock_catalogue.get_recipe_information = AsyncMock()

            saved = await recipe_service.save_recipe(
                user, "external-716429", db_session, title="Pancakes", image_url="https://img/p.jpg"
            )

        mock_catalogue.get_recipe_information.assert_not_called()
        assert saved.is_external is True
        assert saved.image_url == "https://img/p.jpg"

    async def test_unsave(self, db_session, user, pasta_recipe) -> None:
        """Should remove an existing bookmark once."""
        await recipe_service.save_recipe(user, pasta_recipe.id, db_session)

        assert await recipe_service.unsave_recipe(user, pasta_recipe.id, db_session) is True
        assert await recipe_service.unsave_recipe(user, pasta_recipe.id, db_session) is False

    async def test_get_saved_recipes_includes_resolved_recipe(self, db_session, user, pasta_recipe) -> None:
        """Should attach the personal view of each saved recipe."""
        await recipe_service.save_recipe(user, pasta_recipe.id, db_session)

        saved = await recipe_service.get_saved_recipes(user, db_session)

        assert len(saved) == 1
        assert saved[0]["recipe"]["title"] == "Weeknight Pasta"
        assert saved[0]["recipe"]["source"] == "personal"
        assert saved[0]["recipe"]["ingredients"][1]["original"] == "3 piece tomato (ripe)"
