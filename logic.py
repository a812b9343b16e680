import logging
from typing import Dict, List, Optional

import numpy as np
from scipy.optimize import minimize

from config import Settings, resolve_settings
from models import ELEMENTS, NutrientProfile, Product, Recipe, RecipeProduct, coerce_number

logger = logging.getLogger(__name__)

# Umrechnungsfaktoren (Oxid -> Elementar); Etiketten geben P und K als P2O5 bzw. K2O an
CONVERSION = {
    "P2O5_to_P": 0.4364,
    "K2O_to_K": 0.8302,
}

LABEL_OXIDES = {"p": "P2O5_to_P", "k": "K2O_to_K"}

MIN_DOSE = 1e-6  # g/L, kleinere Vorschläge werden verworfen


def element_ppm(percentage, grams_per_liter) -> float:
    """(% Garantie / 100) × g/L × 1000 = mg/L (ppm)"""
    return (coerce_number(percentage) / 100) * coerce_number(grams_per_liter) * 1000


def _use_conversion(convert_oxides: Optional[bool], settings: Optional[Settings]) -> bool:
    if convert_oxides is None:
        return resolve_settings(settings).convert_oxides
    return convert_oxides


def oxide_factors(convert_oxides: Optional[bool] = None, settings: Optional[Settings] = None) -> np.ndarray:
    """Faktor je Element (Reihenfolge wie ELEMENTS); 1.0 wenn nicht umgerechnet wird."""
    factors = np.ones(len(ELEMENTS))
    if _use_conversion(convert_oxides, settings):
        for element, key in LABEL_OXIDES.items():
            factors[ELEMENTS.index(element)] = CONVERSION[key]
    return factors


def composition_matrix(products: List[Product]) -> np.ndarray:
    """Matrix (12, n_produkte) mit den Gehalten in %."""
    if not products:
        return np.zeros((len(ELEMENTS), 0))
    return np.array([[getattr(p, e) for e in ELEMENTS] for p in products], dtype=float).T


def ppm_per_gram(products: List[Product], convert_oxides: Optional[bool] = None,
                 settings: Optional[Settings] = None) -> np.ndarray:
    """ppm-Beitrag pro 1 g/L für jedes Produkt, shape (12, n_produkte)."""
    matrix = composition_matrix(products)
    return (matrix / 100) * 1000 * oxide_factors(convert_oxides, settings)[:, None]


def _doses(recipe_products: List[RecipeProduct]) -> np.ndarray:
    return np.array([rp.grams_per_liter for rp in recipe_products], dtype=float)


def product_contributions(recipe_products: List[RecipeProduct],
                          convert_oxides: Optional[bool] = None,
                          settings: Optional[Settings] = None) -> List[NutrientProfile]:
    """ppm-Beiträge jedes einzelnen Produkts der Rezeptur."""
    per_gram = ppm_per_gram([rp.product for rp in recipe_products], convert_oxides, settings)
    contrib = per_gram * _doses(recipe_products)  # broadcasting -> (elemente, produkte)
    return [
        NutrientProfile(**dict(zip(ELEMENTS, contrib[:, j].tolist())))
        for j in range(contrib.shape[1])
    ]


def aggregate_ppm(recipe_products: List[RecipeProduct],
                  convert_oxides: Optional[bool] = None,
                  settings: Optional[Settings] = None) -> NutrientProfile:
    """Summe der ppm aller Produkte; alle zwölf Elemente starten bei 0."""
    if not recipe_products:
        return NutrientProfile()
    per_gram = ppm_per_gram([rp.product for rp in recipe_products], convert_oxides, settings)
    totals = per_gram @ _doses(recipe_products)
    return NutrientProfile(**dict(zip(ELEMENTS, totals.tolist())))


def products_for_element(recipe_products: List[RecipeProduct], element: str) -> List[str]:
    """Siglas der Produkte, die das Element enthalten."""
    return [rp.product.code for rp in recipe_products if getattr(rp.product, element, 0) > 0]


def suggest_doses(recipe: Recipe, products: List[Product], max_grams_per_liter: Optional[float] = None,
                  convert_oxides: Optional[bool] = None,
                  settings: Optional[Settings] = None) -> List[RecipeProduct]:
    """
    Findet die Dosierung (g/L) je Produkt, die den Zielwerten der Rezeptur am nächsten kommt.
    Elemente ohne Zielwert werden nicht berücksichtigt.
    """
    targets: Dict[str, float] = recipe.targets()
    if not targets or not products:
        return []
    if max_grams_per_liter is None:
        max_grams_per_liter = resolve_settings(settings).max_grams_per_liter

    rows = [ELEMENTS.index(e) for e in targets]
    matrix = ppm_per_gram(products, convert_oxides, settings)[rows, :]
    target_vector = np.array(list(targets.values()), dtype=float)

    # Zielfunktion: Summe der quadratischen Abweichungen minimieren
    def objective(amounts):
        current_profile = matrix @ amounts
        return np.sum((current_profile - target_vector) ** 2)

    # Startwerte (alle 0 g/L) und keine negativen Mengen
    initial_guess = np.zeros(len(products))
    bounds = [(0, max_grams_per_liter) for _ in range(len(products))]
    res = minimize(objective, initial_guess, bounds=bounds)
    if not res.success:
        logger.warning(f"Dosierungsvorschlag für {recipe.name} nicht konvergiert: {res.message}")

    suggestion = [
        RecipeProduct(product=product, grams_per_liter=float(amount), recipe_id=recipe.id)
        for product, amount in zip(products, res.x)
        if amount > MIN_DOSE
    ]
    logger.info(f"Dosierungsvorschlag für {recipe.name}: {len(suggestion)} von {len(products)} Produkten")
    return suggestion
