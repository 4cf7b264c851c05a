"""
Rating criteria configuration for TopLists.

This file is the single source of truth for which sub-criteria an item can
be rated on, per list category. Sub-ratings are stored as a mapping of
criterion key -> value, where the key is derived from the display name by
``criteria_key()`` and the value is in [0, 5] on quarter points.

CUSTOMIZATION:

To add a category:
    1. Add an entry to RATING_CRITERIA with the category display name
    2. List the criteria display names in the order the UI shows them
    3. Keys are derived automatically (lowercase, accents stripped)
"""

import logging
import math
import re
import unicodedata
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from toplists.errors import InvalidOperation

logger = logging.getLogger(__name__)


# =============================================================================
# Criteria Table
# =============================================================================

# Category display name -> criteria display names
RATING_CRITERIA: dict[str, tuple[str, ...]] = {
    "Películas": ("Interpretación", "Guion", "Producción", "Originalidad", "Música"),
    "Series": ("Interpretación", "Guion", "Producción", "Originalidad", "Música"),
    "Música": ("Composición", "Letra", "Producción", "Originalidad", "Impacto Emocional"),
    "Comida": ("Sabor", "Presentación", "Calidad Ingredientes", "Servicio", "Relación Calidad-Precio"),
    "Viajes": ("Belleza/Paisajes", "Cultura/Historia", "Gastronomía", "Actividades", "Accesibilidad"),
    "Libros": ("Narrativa", "Personajes", "Trama", "Originalidad", "Impacto"),
    "Deportes": ("Habilidad Técnica", "Espectacularidad", "Impacto en el Deporte", "Legado", "Consistencia"),
    "Juegos": ("Jugabilidad", "Gráficos", "Historia", "Originalidad", "Rejugabilidad"),
    "Juegos de mesa": ("Mecánicas", "Estrategia", "Diversión", "Rejugabilidad", "Componentes"),
    "Escape room": ("Enigmas", "Ambientación", "Dificultad", "Originalidad", "Inmersión"),
    "Videojuegos": ("Jugabilidad", "Gráficos", "Historia", "Originalidad", "Rejugabilidad"),
}

# Category used when a list has none
DEFAULT_CATEGORY = "General"

# Bounds for sub-criterion ratings
SUB_RATING_MIN: float = 0.0
SUB_RATING_MAX: float = 5.0
SUB_RATING_STEP: float = 0.25


@dataclass(frozen=True)
class CategoryCriteria:
    """Resolved criteria for one category: display names and storage keys."""
    category: str
    names: tuple[str, ...]
    keys: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "name": self.category,
            "criteria": [
                {"key": key, "label": name}
                for name, key in zip(self.names, self.keys)
            ],
        }


# =============================================================================
# Helpers
# =============================================================================

def criteria_key(name: str) -> str:
    """
    Storage key for a criterion display name.

    >>> criteria_key("Belleza/Paisajes")
    'belleza_paisajes'
    >>> criteria_key("Impacto Emocional")
    'impacto_emocional'
    """
    decomposed = unicodedata.normalize("NFD", name.lower())
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    stripped = stripped.replace("/", "_")
    return re.sub(r"\s+", "_", stripped)


_RESOLVED: Dict[str, CategoryCriteria] = {
    category: CategoryCriteria(
        category=category,
        names=names,
        keys=tuple(criteria_key(n) for n in names),
    )
    for category, names in RATING_CRITERIA.items()
}


def criteria_for(category: Optional[str]) -> Optional[CategoryCriteria]:
    """Resolved criteria for a category, or None for categories without any."""
    if not category:
        return None
    return _RESOLVED.get(category)


def all_categories() -> list[CategoryCriteria]:
    """All configured categories in table order."""
    return list(_RESOLVED.values())


def default_ratings(category: Optional[str]) -> dict[str, float]:
    """Zeroed sub-ratings for every criterion of the category."""
    resolved = criteria_for(category)
    if resolved is None:
        return {}
    return {key: 0.0 for key in resolved.keys}


def validate_sub_ratings(category: Optional[str], ratings: Any) -> dict[str, float]:
    """
    Check sub-ratings against the category's criteria.

    Rules:
    - keys that do not belong to the category are dropped (a list moved to
      another category still carries the old category's keys)
    - values must be finite numbers in [0, 5]
    - values must sit on quarter points (0.25 steps)

    Returns:
        A normalized copy with float values, known keys only.

    Raises:
        InvalidOperation: If ratings is not a mapping, or naming the first
            offending key.
    """
    if not ratings:
        return {}
    if not isinstance(ratings, dict):
        raise InvalidOperation("ratings must be an object of criterion -> number")

    resolved = criteria_for(category)
    allowed = set(resolved.keys) if resolved else set()
    normalized = {}

    for key, value in ratings.items():
        if key not in allowed:
            logger.debug("Dropping rating criterion %r not used by %s", key, category or DEFAULT_CATEGORY)
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidOperation(f"Rating for '{key}' must be a number")
        value = float(value)
        if not math.isfinite(value):
            raise InvalidOperation(f"Rating for '{key}' must be a number")
        if not (SUB_RATING_MIN <= value <= SUB_RATING_MAX):
            raise InvalidOperation(
                f"Rating for '{key}' must be between {SUB_RATING_MIN:g} and {SUB_RATING_MAX:g}"
            )
        if (value / SUB_RATING_STEP) != int(value / SUB_RATING_STEP):
            raise InvalidOperation(f"Rating for '{key}' must use quarter points")
        normalized[key] = value

    return normalized


def average_rating(ratings: Optional[dict]) -> float:
    """
    Overall 0-10 rating from 0-5 sub-ratings.

    Mean of the values times two, rounded half up to one decimal. Empty -> 0.

    >>> average_rating({"trama": 4.25, "narrativa": 0.0})
    4.3
    """
    if not ratings:
        return 0.0
    values = list(ratings.values())
    mean = sum(values) / len(values)
    scaled = Decimal(str(mean * 2)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(scaled)
