"""
Preis- und Kostenrechnung.

Normalisiert (Preis, Menge, Einheit) auf einen Preis pro Gramm bzw. pro
Milliliter und rechnet daraus die Kosten einer Rezeptur hoch. Produkte ohne
verwertbare Preisangaben werden nicht als Fehler behandelt, sondern liefern
None ("nicht berechenbar").
"""
import logging
import re
from typing import List, NamedTuple, Optional

from babel import Locale
from babel.numbers import format_currency as babel_format_currency

from config import UNIT_FACTORS, Settings, resolve_settings
from models import Product, Recipe, RecipeProduct, coerce_number

logger = logging.getLogger(__name__)

# Ganzzahlteil eines Zahlenmusters samt optionalem Nachkommateil, z.B. "#,##0.00"
NUMBER_PART = re.compile(r'([#,]*0)(\.0+)?')


class PricePerUnit(NamedTuple):
    value: float
    unit: str       # "g" oder "ml"
    formatted: str


class CostLine(NamedTuple):
    recipe_product: RecipeProduct
    total_grams: float
    cost: Optional[float]


def with_fraction_digits(pattern: str, digits: int) -> str:
    """Setzt die Nachkommastellen eines CLDR-Musters fest, auch wenn es keine hat ("¤#,##0")."""
    fraction = '.' + '0' * digits if digits else ''
    return ';'.join(
        NUMBER_PART.sub(lambda m: m.group(1) + fraction, part, count=1)
        for part in pattern.split(';')
    )


def _currency_pattern(locale: str, digits: int) -> str:
    return with_fraction_digits(Locale.parse(locale).currency_formats['standard'].pattern, digits)


def format_currency(value: Optional[float], digits: int = 2, locale: Optional[str] = None,
                    currency: Optional[str] = None, settings: Optional[Settings] = None) -> str:
    """Währungsformat der eingestellten Locale, '-' wenn kein Wert vorliegt."""
    if value is None:
        return '-'
    settings = resolve_settings(settings)
    locale = locale or settings.locale
    currency = currency or settings.currency
    return babel_format_currency(
        value, currency,
        format=_currency_pattern(locale, digits),
        locale=locale,
        currency_digits=False,
    )


def price_per_base_unit(price, weight, unit, locale: Optional[str] = None,
                        currency: Optional[str] = None,
                        settings: Optional[Settings] = None) -> Optional[PricePerUnit]:
    """Preis pro g (Masse) bzw. pro ml (Volumen) oder None, wenn nicht berechenbar."""
    price = coerce_number(price)
    weight = coerce_number(weight)
    if price <= 0 or weight <= 0:
        return None
    if unit not in UNIT_FACTORS:
        logger.debug(f"Unbekannte Einheit {unit!r}, kein Preis pro Einheit")
        return None

    factor, base_unit = UNIT_FACTORS[unit]
    value = price / (weight * factor)
    formatted = format_currency(value, digits=3, locale=locale, currency=currency, settings=settings)
    return PricePerUnit(value=value, unit=base_unit, formatted=f"{formatted} / {base_unit}")


def product_price_per_unit(product: Product, settings: Optional[Settings] = None) -> Optional[PricePerUnit]:
    return price_per_base_unit(product.price, product.weight, product.weight_unit, settings=settings)


def total_grams(total_liters, grams_per_liter) -> float:
    return coerce_number(total_liters) * coerce_number(grams_per_liter)


def product_cost(product: Product, recipe: Recipe, grams_per_liter) -> Optional[float]:
    per_unit = product_price_per_unit(product)
    if per_unit is None:
        return None
    return per_unit.value * total_grams(recipe.total_liters, grams_per_liter)


def cost_breakdown(recipe: Recipe, recipe_products: List[RecipeProduct]) -> List[CostLine]:
    lines = []
    for rp in recipe_products:
        lines.append(CostLine(
            recipe_product=rp,
            total_grams=total_grams(recipe.total_liters, rp.grams_per_liter),
            cost=product_cost(rp.product, recipe, rp.grams_per_liter),
        ))
    return lines


def recipe_cost(recipe: Recipe, recipe_products: List[RecipeProduct]) -> Optional[float]:
    """Summe über alle Produkte mit Preisangabe; None nur, wenn keines berechenbar ist."""
    costs = []
    for line in cost_breakdown(recipe, recipe_products):
        if line.cost is None:
            logger.debug(f"{line.recipe_product.product.name}: keine Preisdaten, nicht in den Kosten enthalten")
            continue
        costs.append(line.cost)
    if not costs:
        return None
    return sum(costs)
