import math
from typing import Dict, List, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

ELEMENTS = ['n', 'p', 'k', 'ca', 'mg', 's', 'b', 'cu', 'fe', 'mn', 'zn', 'mo']
MACRO_ELEMENTS = ['n', 'p', 'k', 'ca', 'mg', 's']

WeightUnit = Literal['kg', 'g', 'mg', 'L', 'ml']
RecipeType = Literal['vega', 'flora', 'clone', 'madre']


class DuplicateProductError(ValueError):
    """Produkt ist bereits Teil der Rezeptur."""


def coerce_number(value, default=0.0):
    """Wandelt Formularwerte in float um; None, NaN und Unsinn ergeben `default`."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return number


def _optional_number(value):
    return coerce_number(value, default=None)


class NutrientProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    n: float = 0.0   # Stickstoff
    p: float = 0.0   # Phosphor
    k: float = 0.0   # Kalium
    ca: float = 0.0  # Calcium
    mg: float = 0.0  # Magnesium
    s: float = 0.0   # Schwefel
    b: float = 0.0   # Bor
    cu: float = 0.0  # Kupfer
    fe: float = 0.0  # Eisen
    mn: float = 0.0  # Mangan
    zn: float = 0.0  # Zink
    mo: float = 0.0  # Molybdän

    @field_validator(*ELEMENTS, mode='before')
    @classmethod
    def _coerce_nutrient(cls, value):
        return coerce_number(value)

    def as_dict(self) -> Dict[str, float]:
        return {e: getattr(self, e) for e in ELEMENTS}


class Product(NutrientProfile):
    """Dünger mit garantierten Gehalten in Massen-% (P als P2O5, K als K2O)."""

    id: str
    name: str
    brand: str = ''
    code: str = ''  # Sigla, z.B. "MKP"
    image_url: Optional[str] = None
    product_url: Optional[str] = None
    password: Optional[str] = None
    price: Optional[float] = None
    weight: Optional[float] = None
    weight_unit: Optional[WeightUnit] = None

    @field_validator(*ELEMENTS)
    @classmethod
    def _non_negative(cls, value):
        if value < 0:
            raise ValueError('Nährstoffgehalt darf nicht negativ sein')
        return value

    @field_validator('price', 'weight', mode='before')
    @classmethod
    def _coerce_optional(cls, value):
        return _optional_number(value)


class Recipe(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    total_liters: float = 0.0
    ec: float = 0.0
    ph: float = 0.0
    owner: Optional[str] = None
    password: Optional[str] = None
    recipe_types: Set[RecipeType] = Field(default_factory=set)

    # Zielwerte in ppm (mg/L), None = kein Ziel gesetzt
    target_n: Optional[float] = None
    target_p: Optional[float] = None
    target_k: Optional[float] = None
    target_ca: Optional[float] = None
    target_mg: Optional[float] = None
    target_s: Optional[float] = None
    target_b: Optional[float] = None
    target_cu: Optional[float] = None
    target_fe: Optional[float] = None
    target_mn: Optional[float] = None
    target_zn: Optional[float] = None
    target_mo: Optional[float] = None

    @field_validator('total_liters', 'ec', 'ph', mode='before')
    @classmethod
    def _coerce_display(cls, value):
        return coerce_number(value)

    @field_validator(*[f'target_{e}' for e in ELEMENTS], mode='before')
    @classmethod
    def _coerce_target(cls, value):
        return _optional_number(value)

    def target(self, element: str) -> Optional[float]:
        return getattr(self, f'target_{element}', None)

    def targets(self) -> Dict[str, float]:
        """Nur die gesetzten Zielwerte, in Elementreihenfolge."""
        return {e: self.target(e) for e in ELEMENTS if self.target(e) is not None}


class RecipeProduct(BaseModel):
    model_config = ConfigDict(frozen=True)

    product: Product
    grams_per_liter: float = 0.0
    recipe_id: Optional[str] = None
    id: Optional[str] = None

    @field_validator('grams_per_liter', mode='before')
    @classmethod
    def _coerce_dose(cls, value):
        return coerce_number(value)

    @property
    def product_id(self) -> str:
        return self.product.id


def add_recipe_product(items: List[RecipeProduct], product: Product, grams_per_liter,
                       recipe_id: Optional[str] = None) -> List[RecipeProduct]:
    """Fügt ein Produkt hinzu; pro Rezeptur ist jedes Produkt nur einmal erlaubt."""
    dose = coerce_number(grams_per_liter)
    if dose <= 0:
        raise ValueError('g/L muss größer als 0 sein')
    if any(rp.product_id == product.id for rp in items):
        raise DuplicateProductError(f'Produkt {product.name} ist bereits in der Rezeptur')
    return list(items) + [RecipeProduct(product=product, grams_per_liter=dose, recipe_id=recipe_id)]


def update_recipe_product_dose(items: List[RecipeProduct], product_id: str, grams_per_liter) -> List[RecipeProduct]:
    dose = coerce_number(grams_per_liter)
    return [
        rp.model_copy(update={'grams_per_liter': dose}) if rp.product_id == product_id else rp
        for rp in items
    ]


def remove_recipe_product(items: List[RecipeProduct], product_id: str) -> List[RecipeProduct]:
    return [rp for rp in items if rp.product_id != product_id]
