"""
Sortierung von Produkten und Tabellenzeilen.

Standardreihenfolge nach Sigla: NC, NP, MKP, SM, SP, Fe, B, Mn, Zn, Cu, Mo.
Produkte ohne gelistete Sigla folgen danach, alphabetisch nach Name.
"""
import unicodedata
from dataclasses import dataclass, field, replace
from functools import cmp_to_key
from numbers import Number
from typing import Callable, List, Optional

from config import Settings
from models import coerce_number

DOMAIN_ORDER = ("NC", "NP", "MKP", "SM", "SP", "Fe", "B", "Mn", "Zn", "Cu", "Mo")
CODE_RANK = {code: rank for rank, code in enumerate(DOMAIN_ORDER)}

ASC = "asc"
DESC = "desc"


def domain_rank(code: Optional[str]) -> Optional[int]:
    return CODE_RANK.get(code)


def collation_key(text: str):
    """Vergleich wie localeCompare: erst Grundbuchstaben, dann Akzente, dann Groß/Klein (klein zuerst)."""
    decomposed = unicodedata.normalize('NFD', text)
    base = ''.join(c for c in decomposed if not unicodedata.combining(c)).casefold()
    accents = unicodedata.normalize('NFD', text.casefold())
    case = tuple(1 if c.isupper() else 0 for c in text)
    return base, accents, case


def locale_compare(a: str, b: str) -> int:
    ka, kb = collation_key(a), collation_key(b)
    return (ka > kb) - (ka < kb)


def _identity(row):
    return row


def sort_products_by_domain_order(rows: List, key: Optional[Callable] = None) -> List:
    """Gibt eine neue, stabil sortierte Liste zurück. `key` liefert das Produkt einer Zeile."""
    key = key or _identity

    def sort_key(row):
        product = key(row)
        rank = domain_rank(product.code)
        if rank is not None:
            return 0, rank, ()
        return 1, 0, collation_key(product.name)

    return sorted(rows, key=sort_key)


def _value(row, column: str):
    if isinstance(row, dict):
        return row.get(column)
    return getattr(row, column, None)


def _missing_text_last(a, b) -> int:
    """Fehlende Texte stehen unabhängig von der Richtung immer am Ende."""
    if a is None and isinstance(b, str):
        return 1
    if b is None and isinstance(a, str):
        return -1
    return 0


def _compare_values(a, b) -> int:
    if isinstance(a, str) and isinstance(b, str):
        return locale_compare(a, b)
    if isinstance(a, Number) or isinstance(b, Number):
        diff = coerce_number(a) - coerce_number(b)
        return (diff > 0) - (diff < 0)
    return 0


def sort_by_column(rows: List, column: str, direction: str = DESC, key: Optional[Callable] = None) -> List:
    """Texte per locale_compare, Zahlen per Differenz; bei desc wird der Vergleich umgekehrt, nicht die Liste."""
    key = key or _identity
    sign = -1 if direction == DESC else 1

    def compare(x, y):
        a, b = _value(key(x), column), _value(key(y), column)
        return _missing_text_last(a, b) or sign * _compare_values(a, b)

    return sorted(rows, key=cmp_to_key(compare))


@dataclass(frozen=True)
class SortState:
    """Spaltensortierung einer Tabelle; ohne Spalte gilt die Sigla-Reihenfolge."""

    column: Optional[str] = None
    direction: Optional[str] = None  # None -> Standardrichtung aus den Einstellungen
    settings: Settings = field(default_factory=Settings, compare=False, repr=False)

    def __post_init__(self):
        if self.direction is None:
            object.__setattr__(self, 'direction', self.settings.default_sort_direction)

    def toggle(self, column: str) -> "SortState":
        if self.column == column:
            return replace(self, direction=ASC if self.direction == DESC else DESC)
        return SortState(column=column, settings=self.settings)

    def reset(self) -> "SortState":
        return SortState(settings=self.settings)

    def apply(self, rows: List, key: Optional[Callable] = None) -> List:
        if self.column is None:
            return sort_products_by_domain_order(rows, key=key)
        return sort_by_column(rows, self.column, self.direction, key=key)
