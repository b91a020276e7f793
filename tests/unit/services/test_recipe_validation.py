"""Unit tests for imported recipe validation."""

from services.recipe_validation import validate_recipe


def _issue_fields(result, severity):
    return [issue.field for issue in result.issues if issue.severity == severity]


class TestValidateRecipe:
    """Tests for validate_recipe."""

    def test_complete_recipe_is_valid(self) -> None:
        """Should pass a recipe with title, ingredients, steps and servings."""
        result = validate_recipe({
            "title": "Weeknight Chili",
            "ingredients": [{"name": "beans"}],
            "instructions": ["Simmer."],
            "servings": 4,
        })

        assert result.is_valid is True
        assert result.issues == []

    def test_missing_core_fields_are_errors(self) -> None:
        """Should flag title, ingredients and instructions as errors."""
        # Act
        result = validate_recipe({"title": "ab"})

        # Assert
        assert result.is_valid is False
        assert _issue_fields(result, "error") == ["title", "ingredients", "instructions"]
        assert len(result.suggestions) == 3

    def test_fallback_recipe_is_valid_with_warning(self) -> None:
        """Should warn, not fail, for placeholder recipes."""
        result = validate_recipe({
            "title": "Imported Recipe",
            "ingredients": [{"name": "flour"}],
            "instructions": ["Bake."],
            "servings": 12,
            "tags": ["imported", "url", "fallback"],
        })

        assert result.is_valid is True
        assert _issue_fields(result, "warning") == ["source_url"]

    def test_missing_servings_is_informational(self) -> None:
        """Should note missing servings without failing."""
        result = validate_recipe({"title": "Toast", "ingredients": ["bread"], "instructions": ["Toast it."]})

        assert result.is_valid is True
        assert _issue_fields(result, "info") == ["servings"]

    def test_to_dict(self) -> None:
        """Should serialize issues as plain dicts."""
        data = validate_recipe({}).to_dict()

        assert data["is_valid"] is False
        assert data["issues"][0]["field"] == "title"
        assert set(data["issues"][0]) == {"field", "expected", "actual", "severity", "message"}
