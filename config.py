import json
import logging
import os
from typing import Literal, Optional

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

# Massen auf Gramm, Volumina auf Milliliter
UNIT_FACTORS = {
    "kg": (1000.0, "g"),
    "g": (1.0, "g"),
    "mg": (0.001, "g"),
    "L": (1000.0, "ml"),
    "ml": (1.0, "ml"),
}

SETTINGS_ENV_VAR = "DUENGERRECHNER_SETTINGS"
DEFAULT_SETTINGS_PATH = os.path.join('data', 'settings.json')


class Settings(BaseModel):
    convert_oxides: bool = True  # P2O5/K2O -> P/K bei allen ppm-Berechnungen
    locale: str = "pt_BR"
    currency: str = "BRL"
    credential_ttl_days: float = 7
    default_sort_direction: Literal["asc", "desc"] = "desc"
    max_grams_per_liter: float = 10.0


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Liest Einstellungen aus einer JSON-Datei; fehlt sie oder ist sie kaputt, gelten die Standardwerte.

    Nur für die aufrufende Schicht gedacht: die Berechnungsfunktionen lesen
    nie selbst Dateien, sondern bekommen `Settings` übergeben.
    """
    path = path or os.environ.get(SETTINGS_ENV_VAR) or DEFAULT_SETTINGS_PATH
    if not os.path.exists(path):
        return Settings()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return Settings(**(data or {}))
    except (OSError, ValueError, TypeError, ValidationError) as e:
        logger.error(f"Einstellungen aus {path} nicht geladen: {e}")
        return Settings()


def resolve_settings(settings: Optional[Settings] = None) -> Settings:
    """Übergebene Einstellungen oder die Standardwerte."""
    return settings if settings is not None else Settings()
