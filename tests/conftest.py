import pytest

import config
from models import Product, Recipe, RecipeProduct


@pytest.fixture(autouse=True)
def no_settings_env(monkeypatch):
    """load_settings soll in Tests nie eine Datei aus der Umgebung lesen."""
    monkeypatch.delenv(config.SETTINGS_ENV_VAR, raising=False)


@pytest.fixture
def calcium_nitrate():
    return Product(id="nc", name="Nitrato de Cálcio", brand="Yara", code="NC",
                   n=15, ca=19, price=50.0, weight=1, weight_unit="kg")


@pytest.fixture
def mkp():
    return Product(id="mkp", name="Fosfato Monopotássico", brand="Haifa", code="MKP",
                   p=52, k=34, price=30.0, weight=500, weight_unit="g")


@pytest.fixture
def map_60():
    return Product(id="map", name="MAP Purificado", brand="Vale", code="NP", p=60)


@pytest.fixture
def iron_chelate():
    return Product(id="fe", name="Quelato de Ferro", brand="Tradecorp", code="Fe",
                   fe=6, price=12.0, weight=100, weight_unit="g")


@pytest.fixture
def recipe():
    return Recipe(id="r1", name="Alface Vega", total_liters=10, ec=1.2, ph=5.8,
                  recipe_types={"vega"}, target_n=150, target_p=130.92)


@pytest.fixture
def recipe_products(calcium_nitrate, map_60):
    return [
        RecipeProduct(product=calcium_nitrate, grams_per_liter=1, recipe_id="r1"),
        RecipeProduct(product=map_60, grams_per_liter=0.5, recipe_id="r1"),
    ]
