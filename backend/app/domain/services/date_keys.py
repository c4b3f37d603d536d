"""
Clés de date YYYY-MM-DD.

Le format est de largeur fixe et complété par des zéros : l'ordre
lexicographique des chaînes est donc l'ordre chronologique, ce qui permet
les requêtes par intervalle directement sur la colonne texte.
"""
import calendar
import re
from datetime import date, datetime, timedelta
from typing import Iterator, Tuple

from app.domain.exceptions import ActivityValidationError

DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_date_key(value: str) -> str:
    """Vérifie qu'une clé respecte YYYY-MM-DD et désigne un jour du calendrier."""
    if not isinstance(value, str) or not DATE_KEY_PATTERN.match(value):
        raise ActivityValidationError(
            f"Format de date invalide: {value!r}. Utiliser YYYY-MM-DD"
        )
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ActivityValidationError(f"Date inexistante: {value}")
    return value


def validate_date_range(start: str, end: str) -> Tuple[str, str]:
    """Valide les deux bornes. Un intervalle inversé reste valide (il est vide)."""
    return validate_date_key(start), validate_date_key(end)


def year_bounds(year: int) -> Tuple[str, str]:
    if not 1 <= year <= 9999:
        raise ActivityValidationError(f"Annee invalide: {year}")
    return f"{year:04d}-01-01", f"{year:04d}-12-31"


def month_bounds(year: int, month: int) -> Tuple[str, str]:
    if not 1 <= year <= 9999:
        raise ActivityValidationError(f"Annee invalide: {year}")
    if not 1 <= month <= 12:
        raise ActivityValidationError(f"Mois invalide: {month}")
    last_day = calendar.monthrange(year, month)[1]
    return f"{year:04d}-{month:02d}-01", f"{year:04d}-{month:02d}-{last_day:02d}"


def iter_year_days(year: int) -> Iterator[str]:
    """Toutes les clés de date d'une année, dans l'ordre."""
    year_bounds(year)
    first = date(year, 1, 1)
    for offset in range((date(year, 12, 31) - first).days + 1):
        yield (first + timedelta(days=offset)).isoformat()
