"""
Schedule model for vessel assignments.

Weekday names arrive in several spellings ("MIERCOLES", "miércoles",
"Miércoles "). They are normalized once when an assignment is written and
only compared in normalized form; accented names are produced for display.
"""

import unicodedata
from collections.abc import Iterable
from datetime import date, datetime
from zoneinfo import ZoneInfo

from ..core.config import settings
from ..models.assignment import VesselAssignment

# Indexed by date.weekday(), Monday first
WEEKDAYS = (
    "LUNES",
    "MARTES",
    "MIERCOLES",
    "JUEVES",
    "VIERNES",
    "SABADO",
    "DOMINGO",
)

_DISPLAY_NAMES = {
    "LUNES": "Lunes",
    "MARTES": "Martes",
    "MIERCOLES": "Miércoles",
    "JUEVES": "Jueves",
    "VIERNES": "Viernes",
    "SABADO": "Sábado",
    "DOMINGO": "Domingo",
}


def normalize_weekday(name: str) -> str:
    """Strip diacritics, uppercase and trim a weekday name."""
    decomposed = unicodedata.normalize("NFD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.upper().strip()


def normalize_operating_days(days: Iterable[str]) -> list[str]:
    """
    Normalize a set of operating days, keeping first-seen order.

    Raises:
        ValueError: If a name is not a Spanish weekday
    """
    normalized: list[str] = []
    for day in days:
        value = normalize_weekday(day)
        if value not in WEEKDAYS:
            raise ValueError(f"'{day}' is not a weekday")
        if value not in normalized:
            normalized.append(value)
    return normalized


def weekday_for_date(travel_date: date) -> str:
    return WEEKDAYS[travel_date.weekday()]


def is_operating_day(operating_days: Iterable[str], travel_date: date) -> bool:
    """
    Check whether a vessel sails on the given date.

    An empty set of operating days means the assignment has no weekday
    restriction and every date is valid.
    """
    days = {normalize_weekday(day) for day in operating_days}
    if not days:
        return True
    return weekday_for_date(travel_date) in days


def departure_times_for(assignment: VesselAssignment) -> list[str]:
    """Configured departure times, in configured order."""
    return list(assignment.departure_times or [])


def display_weekday(name: str) -> str:
    """Accented display form of a weekday, e.g. MIERCOLES -> Miércoles."""
    normalized = normalize_weekday(name)
    return _DISPLAY_NAMES.get(normalized, name.strip().title())


def now_local() -> datetime:
    """Current time in the ticket office's timezone."""
    return datetime.now(ZoneInfo(settings.timezone))


def today_local() -> date:
    """Current date in the ticket office's timezone."""
    return now_local().date()
