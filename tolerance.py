"""
Soll/Ist-Vergleich und Anzeigeformate für ppm-Werte.

Makronährstoffe: 2 Nachkommastellen, Toleranz ±0.9 ppm
Mikronährstoffe: bis zu 7 Nachkommastellen, Toleranz ±0.00000001 ppm
"""
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import List, NamedTuple, Optional

from models import ELEMENTS, MACRO_ELEMENTS, NutrientProfile, Product, Recipe

MACRO_TOLERANCE = 0.9
MICRO_TOLERANCE = 0.00000001

ELEMENT_CONFIG = {
    e: {"is_macro": e in MACRO_ELEMENTS, "tolerance": MACRO_TOLERANCE if e in MACRO_ELEMENTS else MICRO_TOLERANCE}
    for e in ELEMENTS
}

MACRO_DIGITS = 2
MICRO_DIGITS = 7

# relativer Spielraum für Rundungsreste wie 150.9 - 150 = 0.9000000000000057
FLOAT_SLACK = 1e-12


class TargetComparison(NamedTuple):
    element: str
    actual: float
    target: float
    delta: float
    within_tolerance: bool
    status: str  # "ok", "deficit" oder "surplus"
    label: str


def is_macronutrient(element: str) -> bool:
    return ELEMENT_CONFIG.get(element, {}).get("is_macro", True)


def get_element_tolerance(element: str) -> float:
    return ELEMENT_CONFIG.get(element, {}).get("tolerance", MACRO_TOLERANCE)


def _is_missing(value) -> bool:
    return value is None or not math.isfinite(value)


def _fixed(value: float, digits: int) -> str:
    # kaufmännisch runden auf dem exakten Binärwert
    quantum = Decimal(1).scaleb(-digits)
    return f"{Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP):.{digits}f}"


def format_number(value: Optional[float]) -> str:
    if _is_missing(value):
        return '0.00'
    return _fixed(value, 2)


def format_ppm(value: Optional[float], element: str) -> str:
    if _is_missing(value):
        return '0.00' if is_macronutrient(element) else '0.0000000'

    if is_macronutrient(element):
        return _fixed(value, MACRO_DIGITS)

    # Mikronährstoffe: Nullen am Ende weg, mindestens eine Nachkommastelle bleibt
    formatted = _fixed(value, MICRO_DIGITS).rstrip('0')
    if formatted.endswith('.'):
        formatted += '0'
    return formatted


def within_tolerance(actual: float, target: Optional[float], element: str) -> Optional[bool]:
    """None, wenn kein Zielwert gesetzt ist."""
    if target is None:
        return None
    slack = FLOAT_SLACK * max(abs(actual), abs(target))
    return abs(actual - target) <= get_element_tolerance(element) + slack


def compare_to_target(element: str, actual: float, target: Optional[float]) -> Optional[TargetComparison]:
    ok = within_tolerance(actual, target, element)
    if ok is None:
        return None

    delta = actual - target
    if ok:
        status = "ok"
        label = f"✓ {'+' if delta >= 0 else ''}{format_ppm(delta, element)}"
    elif delta < 0:
        status = "deficit"
        label = f"- {format_ppm(abs(delta), element)} fehlt"
    else:
        status = "surplus"
        label = f"+ {format_ppm(delta, element)} zu viel"

    return TargetComparison(element, actual, target, delta, ok, status, label)


def compare_recipe(ppm: NutrientProfile, recipe: Recipe) -> List[TargetComparison]:
    comparisons = []
    for element in ELEMENTS:
        comparison = compare_to_target(element, getattr(ppm, element), recipe.target(element))
        if comparison is not None:
            comparisons.append(comparison)
    return comparisons


def _plain(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith('.0') else text


def format_nutrient_summary(product: Product) -> str:
    """Kurzübersicht der Makros für Auswahllisten, z.B. ' | N:15% K:46%'."""
    nutrients = [
        f"{e.capitalize()}:{_plain(getattr(product, e))}%"
        for e in MACRO_ELEMENTS
        if getattr(product, e) > 0
    ]
    return f" | {' '.join(nutrients)}" if nutrients else ''
