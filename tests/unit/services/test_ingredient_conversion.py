"""Unit tests for ingredient conversion and aggregation."""

import pytest

from services.ingredient_conversion import UnitType, ingredient_conversion_service


class TestConvertIngredientQuantity:
    """Tests for recipe-to-shopping conversion."""

    def test_applies_conversion_rule(self) -> None:
        """Should turn cups of chicken into breasts to buy."""
        converted = ingredient_conversion_service.convert_ingredient_quantity("Chicken", 1.5, "cups")

        assert converted.quantity == 3
        assert converted.unit == "piece"
        assert converted.original_quantity == 1.5
        assert converted.original_unit == "cups"

    def test_cooked_rice_halves_volume(self) -> None:
        """Should buy half the cooked volume of dry rice, rounded up."""
        converted = ingredient_conversion_service.convert_ingredient_quantity("rice", 3, "cup")

        assert converted.quantity == 2
        assert converted.unit == "cup"

    def test_without_rule_rounds_up(self) -> None:
        """Should keep the unit and round the quantity up."""
        converted = ingredient_conversion_service.convert_ingredient_quantity("flour", 2.5, "cup")

        assert converted.quantity == 3
        assert converted.unit == "cup"


class TestFormatShoppingQuantity:
    """Tests for shopping display strings."""

    @pytest.mark.parametrize(
        "quantity,unit,expected",
        [
            (1, "piece", "1 piece"),
            (2, "piece", "2 pieces"),
            (2.2, "cup", "3 cups"),
            (1, "pound", "1 pound"),
            (2, "tablespoon", "2 tbsp"),
            (1, "teaspoon", "1 tsp"),
            (3, "gram", "3 gram"),
        ],
    )
    def test_formats(self, quantity, unit, expected) -> None:
        """Should pluralize count units and abbreviate spoons."""
        assert ingredient_conversion_service.format_shopping_quantity(quantity, unit) == expected


class TestStandardUnits:
    """Tests for unit type lookups."""

    def test_volume_converts_to_ml(self) -> None:
        """Should express cups in millilitres."""
        assert ingredient_conversion_service.convert_to_standard_unit(2, "cups") == (480, "ml", UnitType.VOLUME)

    def test_weight_converts_to_grams(self) -> None:
        """Should express pounds in grams."""
        assert ingredient_conversion_service.convert_to_standard_unit(1, "lb") == (454, "g", UnitType.WEIGHT)

    def test_unknown_unit_passes_through(self) -> None:
        """Should leave unknown units untouched."""
        assert ingredient_conversion_service.convert_to_standard_unit(2, "handful") == (2, "handful", UnitType.OTHER)

    def test_compatible_units_share_type(self) -> None:
        """Should list other volume units for a cup."""
        compatible = ingredient_conversion_service.get_compatible_units("cup")

        assert "tablespoon" in compatible
        assert "cup" not in compatible
        assert "gram" not in compatible

    def test_count_units_have_no_compatible_units(self) -> None:
        """Should not offer conversions between count units."""
        assert ingredient_conversion_service.get_compatible_units("piece") == []


class TestAggregateIngredients:
    """Tests for aggregate_ingredients."""

    def test_combines_same_name_case_insensitively(self) -> None:
        """Should merge quantities and collect recipe titles."""
        # Arrange
        entries = [
            {"name": "Onion", "quantity": 1, "unit": "piece", "recipe_title": "Soup"},
            {"name": "onion", "quantity": 2, "unit": "piece", "recipe_title": "Stew"},
            {"name": "Garlic", "quantity": 2, "unit": "clove", "recipe_title": "Soup"},
        ]

        # Act
        aggregated = ingredient_conversion_service.aggregate_ingredients(entries)

        # Assert
        assert [item.name for item in aggregated] == ["Garlic", "Onion"]
        onion = aggregated[1]
        assert onion.quantity == 3
        assert onion.recipes == ["Soup", "Stew"]
        assert onion.display == "3 pieces"

    def test_different_units_stay_separate(self) -> None:
        """Should not merge entries whose shopping units differ."""
        entries = [
            {"name": "Milk", "quantity": 1, "unit": "cup"},
            {"name": "Milk", "quantity": 1, "unit": "liter"},
        ]

        aggregated = ingredient_conversion_service.aggregate_ingredients(entries)

        assert len(aggregated) == 2

    def test_skips_entries_without_name(self) -> None:
        """Should drop blank ingredient names."""
        aggregated = ingredient_conversion_service.aggregate_ingredients([{"name": "  ", "quantity": 1}])

        assert aggregated == []

    def test_to_dict_shape(self) -> None:
        """Should serialize with total_quantity."""
        aggregated = ingredient_conversion_service.aggregate_ingredients(
            [{"name": "Salt", "quantity": 1, "unit": "teaspoon", "category": "spices"}]
        )

        data = aggregated[0].to_dict()

        assert data["total_quantity"] == 1
        assert data["category"] == "spices"
        assert data["display"] == "1 tsp"
