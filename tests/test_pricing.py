import math

import pytest

from config import Settings
from models import Product, Recipe, RecipeProduct
from pricing import (
    cost_breakdown,
    format_currency,
    price_per_base_unit,
    product_cost,
    product_price_per_unit,
    recipe_cost,
    total_grams,
    with_fraction_digits,
)


class TestPricePerBaseUnit:

    def test_kilogram_to_gram(self):
        result = price_per_base_unit(50, 1, "kg")
        assert result.value == pytest.approx(0.05)
        assert result.unit == "g"

    def test_unit_equivalence(self):
        assert price_per_base_unit(50, 1, "kg").value == pytest.approx(price_per_base_unit(50, 1000, "g").value)
        assert price_per_base_unit(20, 1, "L").value == pytest.approx(price_per_base_unit(20, 1000, "ml").value)

    def test_milligram(self):
        result = price_per_base_unit(10, 500, "mg")
        assert result.value == pytest.approx(20.0)
        assert result.unit == "g"

    def test_volume_units_use_ml(self):
        assert price_per_base_unit(20, 1, "L").unit == "ml"
        assert price_per_base_unit(20, 250, "ml").unit == "ml"

    @pytest.mark.parametrize("price,weight,unit", [
        (0, 1, "kg"),
        (-5, 1, "kg"),
        (50, 0, "kg"),
        (50, -1, "g"),
        (None, 1, "kg"),
        (50, None, "kg"),
        (math.nan, 1, "kg"),
        (50, 1, None),
        (50, 1, "lb"),
    ])
    def test_not_computable(self, price, weight, unit):
        assert price_per_base_unit(price, weight, unit) is None

    def test_formatted_has_three_digits_and_unit(self):
        result = price_per_base_unit(50, 1, "kg")
        assert result.formatted.startswith("R$")
        assert "0,050" in result.formatted
        assert result.formatted.endswith(" / g")

    def test_formatted_other_locale(self):
        result = price_per_base_unit(50, 1, "kg", locale="en_US", currency="USD")
        assert result.formatted == "$0.050 / g"

    def test_formatted_with_injected_settings(self):
        result = price_per_base_unit(50, 1, "kg", settings=Settings(locale="en_US", currency="USD"))
        assert result.formatted == "$0.050 / g"

    def test_explicit_locale_beats_settings(self):
        result = price_per_base_unit(50, 1, "kg", locale="en_US", currency="USD", settings=Settings())
        assert result.formatted == "$0.050 / g"


class TestFormatCurrency:

    def test_none_is_placeholder(self):
        assert format_currency(None) == "-"

    def test_two_digits(self):
        text = format_currency(0.5)
        assert text.startswith("R$")
        assert text.endswith("0,50")

    def test_settings_choose_locale(self):
        assert format_currency(1234.5, settings=Settings(locale="en_US", currency="USD")) == "$1,234.50"


class TestFractionDigits:

    @pytest.mark.parametrize("pattern, expected", [
        ("¤#,##0", "¤#,##0.000"),
        ("¤#,##0.00", "¤#,##0.000"),
        ("¤\xa0#,##0.00", "¤\xa0#,##0.000"),
        ("#,##0.00\xa0¤", "#,##0.000\xa0¤"),
        ("¤#,##0.00;(¤#,##0.00)", "¤#,##0.000;(¤#,##0.000)"),
    ])
    def test_three_digits(self, pattern, expected):
        assert with_fraction_digits(pattern, 3) == expected

    def test_zero_digits_drops_fraction(self):
        assert with_fraction_digits("¤#,##0.00", 0) == "¤#,##0"

    def test_currency_without_cents_gets_three_digits(self):
        assert format_currency(1234.5, digits=3, locale="ja_JP", currency="JPY").endswith("1,234.500")


class TestCosts:

    def test_total_grams(self):
        assert total_grams(10, 1) == 10
        assert total_grams(20, 0.25) == pytest.approx(5.0)

    def test_end_to_end_product_cost(self, calcium_nitrate, recipe):
        assert product_price_per_unit(calcium_nitrate).value == pytest.approx(0.05)
        assert product_cost(calcium_nitrate, recipe, 1) == pytest.approx(0.50)

    def test_product_without_price(self, map_60, recipe):
        assert product_cost(map_60, recipe, 0.5) is None

    def test_recipe_cost_skips_products_without_price(self, recipe, recipe_products, mkp):
        items = recipe_products + [RecipeProduct(product=mkp, grams_per_liter=0.2)]
        # NC: 0.05 R$/g * 10 g, MKP: 0.06 R$/g * 2 g, MAP ohne Preis
        assert recipe_cost(recipe, items) == pytest.approx(0.50 + 0.12)

    def test_recipe_cost_undefined_without_prices(self, recipe, map_60):
        assert recipe_cost(recipe, [RecipeProduct(product=map_60, grams_per_liter=1)]) is None
        assert recipe_cost(recipe, []) is None

    def test_breakdown(self, recipe, recipe_products):
        lines = cost_breakdown(recipe, recipe_products)
        assert [line.total_grams for line in lines] == [pytest.approx(10.0), pytest.approx(5.0)]
        assert lines[0].cost == pytest.approx(0.5)
        assert lines[1].cost is None

    def test_zero_price_product_excluded(self, recipe):
        free = Product(id="x", name="Amostra", code="X", n=10, price=0, weight=1, weight_unit="kg")
        assert recipe_cost(recipe, [RecipeProduct(product=free, grams_per_liter=1)]) is None
