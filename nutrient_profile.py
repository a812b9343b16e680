import pandas as pd

from logic import aggregate_ppm, product_contributions, products_for_element
from models import ELEMENTS
from pricing import cost_breakdown, format_currency, product_price_per_unit
from tolerance import compare_to_target, format_number, format_ppm, is_macronutrient


class NutrientReport:
    """Hilfsfunktionen zum Erzeugen von Tabellen für die Rezepturansicht."""

    NUTRIENT_KEYS = ELEMENTS
    NUTRIENT_LABELS = ['N', 'P', 'K', 'Ca', 'Mg', 'S', 'B', 'Cu', 'Fe', 'Mn', 'Zn', 'Mo']

    @staticmethod
    def comparison_df(recipe, recipe_products, convert_oxides=None, settings=None):
        """Eine Zeile pro Element: Ist-Wert, Ziel, Abweichung und beteiligte Produkte.

        Elemente ohne Zielwert haben leere Ziel-/Statusspalten.
        """
        ppm = aggregate_ppm(recipe_products, convert_oxides, settings)
        rows = []
        for element, label in zip(NutrientReport.NUTRIENT_KEYS, NutrientReport.NUTRIENT_LABELS):
            actual = getattr(ppm, element)
            target = recipe.target(element)
            comparison = compare_to_target(element, actual, target)
            rows.append({
                "element": element,
                "Nährstoff": label,
                "macro": is_macronutrient(element),
                "ppm": actual,
                "ppm_text": format_ppm(actual, element),
                "target": target,
                "target_text": format_ppm(target, element) if target is not None else None,
                "delta": comparison.delta if comparison else None,
                "status": comparison.status if comparison else None,
                "label": comparison.label if comparison else None,
                "products": products_for_element(recipe_products, element),
            })
        return pd.DataFrame(rows)

    @staticmethod
    def contribution_df(recipe_products, convert_oxides=None, settings=None):
        """Langformat: Beitrag jedes Produkts zu jedem Element (mg/L)."""
        contributions = product_contributions(recipe_products, convert_oxides, settings)
        rows = []
        for i, element in enumerate(NutrientReport.NUTRIENT_KEYS):
            for rp, contrib in zip(recipe_products, contributions):
                val = float(getattr(contrib, element))
                if val > 1e-9:
                    rows.append({
                        "Nährstoff": NutrientReport.NUTRIENT_LABELS[i],
                        "Produkt": rp.product.code or rp.product.name,
                        "value": val,
                    })
        return pd.DataFrame(rows, columns=["Nährstoff", "Produkt", "value"])

    @staticmethod
    def share_df(recipe_products, convert_oxides=None, settings=None):
        """Gesamt-ppm pro Produkt und prozentualer Anteil."""
        contributions = product_contributions(recipe_products, convert_oxides, settings)
        rows = []
        for rp, contrib in zip(recipe_products, contributions):
            val = float(sum(contrib.as_dict().values()))
            if val > 1e-9:
                rows.append({"Komponente": rp.product.code or rp.product.name, "value": val})

        df = pd.DataFrame(rows)
        if df.empty:
            return df
        df['pct'] = df['value'] / df['value'].sum() * 100
        return df

    @staticmethod
    def cost_df(recipe, recipe_products, settings=None):
        rows = []
        for line in cost_breakdown(recipe, recipe_products):
            product = line.recipe_product.product
            per_unit = product_price_per_unit(product, settings)
            rows.append({
                "Produkt": product.name,
                "Sigla": product.code,
                "g/L": line.recipe_product.grams_per_liter,
                "Gramm gesamt": format_number(line.total_grams),
                "Preis pro Einheit": per_unit.formatted if per_unit else '-',
                "cost": line.cost,
                "Kosten": format_currency(line.cost, settings=settings),
            })
        return pd.DataFrame(rows)
