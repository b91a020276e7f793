"""Unit tests for UserService."""

import pytest

from services.auth_service import AuthClaims
from services.meal_plan_service import meal_plan_service
from services.recipe_service import recipe_service
from services.user_service import user_service


class TestSyncUserFromAuth:
    """Tests for sync_user_from_auth."""

    async def test_creates_new_user(self, db_session) -> None:
        """Should create a user with a lowercased email."""
        # Arrange
        claims = AuthClaims(auth_provider_id="user_new", email="New@Example.com", first_name="Nia")

        # Act
        user = await user_service.sync_user_from_auth(claims, db_session)

        # Assert
        assert user.id is not None
        assert user.email == "new@example.com"
        assert user.first_name == "Nia"
        assert await user_service.get_user_by_auth_id("user_new", db_session) is user

    async def test_updates_existing_user(self, db_session, user) -> None:
        """Should refresh profile fields for a known provider id."""
        claims = AuthClaims(auth_provider_id="user_test_1", email="cook@example.com", last_name="Baker")

        synced = await user_service.sync_user_from_auth(claims, db_session)

        assert synced.id == user.id
        assert synced.last_name == "Baker"
        assert synced.first_name == "Casey"

    async def test_links_existing_email_to_new_provider_id(self, db_session, user) -> None:
        """Should attach the provider id to an account found by email."""
        claims = AuthClaims(auth_provider_id="user_migrated", email="COOK@example.com")

        synced = await user_service.sync_user_from_auth(claims, db_session)

        assert synced.id == user.id
        assert synced.auth_provider_id == "user_migrated"

    async def test_email_taken_by_another_user_raises(self, db_session, user, other_user) -> None:
        """Should refuse to move a user onto another account's email."""
        claims = AuthClaims(auth_provider_id="user_test_1", email="Other@example.com")

        with pytest.raises(ValueError, match="already used"):
            await user_service.sync_user_from_auth(claims, db_session)

        assert user.email == "cook@example.com"

    async def test_email_change_to_free_address(self, db_session, user) -> None:
        """Should update the email when nobody else has it."""
        claims = AuthClaims(auth_provider_id="user_test_1", email="casey@example.com")

        synced = await user_service.sync_user_from_auth(claims, db_session)

        assert synced.email == "casey@example.com"

    async def test_new_user_without_email_raises(self, db_session) -> None:
        """Should refuse to create a user without an email."""
        with pytest.raises(ValueError, match="Email is required"):
            await user_service.sync_user_from_auth(AuthClaims(auth_provider_id="user_anon"), db_session)


class TestLookups:
    """Tests for user lookups."""

    async def test_get_by_email_is_case_insensitive(self, db_session, user) -> None:
        """Should match regardless of the email's case."""
        assert await user_service.get_user_by_email("Cook@Example.com", db_session) is user

    async def test_blank_email_returns_none(self, db_session) -> None:
        """Should not query for blank emails."""
        assert await user_service.get_user_by_email("", db_session) is None


class TestGetUserStats:
    """Tests for get_user_stats."""

    async def test_counts_owned_rows(self, db_session, user, other_user, pasta_recipe, week) -> None:
        """Should count only the user's rows and active plans."""
        # Arrange
        await recipe_service.create_recipe(other_user, {"title": "Not mine"}, db_session)
        await recipe_service.save_recipe(user, pasta_recipe.id, db_session)
        plan = await meal_plan_service.create_meal_plan(user, "Plan", week[0], week[1], db_session)
        await meal_plan_service.generate_grocery_list(user, plan.id, db_session)
        retired = await meal_plan_service.create_meal_plan(user, "Old", week[0], week[1], db_session)
        await meal_plan_service.delete_meal_plan(user, retired.id, db_session)

        # Act
        stats = await user_service.get_user_stats(user, db_session)

        # Assert
        assert stats == {"recipes": 1, "meal_plans": 1, "grocery_lists": 1, "saved_recipes": 1}
