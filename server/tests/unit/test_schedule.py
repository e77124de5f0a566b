"""Unit tests for the schedule model."""

from datetime import date

import pytest

from river_ticketing.models.assignment import VesselAssignment
from river_ticketing.services.schedule import (
    WEEKDAYS,
    departure_times_for,
    display_weekday,
    is_operating_day,
    normalize_operating_days,
    normalize_weekday,
    weekday_for_date,
)

# 2025-08-04 is a Monday
MONDAY = date(2025, 8, 4)
TUESDAY = date(2025, 8, 5)
WEDNESDAY = date(2025, 8, 6)
SATURDAY = date(2025, 8, 9)


@pytest.mark.parametrize("raw", ["MIERCOLES", "miércoles", "Miércoles ", "  MIÉRCOLES", "miercoles"])
def test_normalize_weekday_spellings(raw):
    assert normalize_weekday(raw) == "MIERCOLES"


def test_normalize_weekday_sabado():
    assert normalize_weekday("Sábado") == "SABADO"
    assert normalize_weekday("SÁBADO") == "SABADO"


def test_weekday_for_date():
    assert weekday_for_date(MONDAY) == "LUNES"
    assert weekday_for_date(WEDNESDAY) == "MIERCOLES"
    assert weekday_for_date(SATURDAY) == "SABADO"
    assert weekday_for_date(date(2025, 8, 10)) == "DOMINGO"


@pytest.mark.parametrize("day", ["MIERCOLES", "miércoles", "Miércoles "])
def test_is_operating_day_ignores_spelling(day):
    assert is_operating_day([day], WEDNESDAY) is True
    assert is_operating_day([day], TUESDAY) is False


def test_is_operating_day_mixed_set():
    days = ["LUNES", "MIERCOLES"]
    assert is_operating_day(days, MONDAY)
    assert not is_operating_day(days, TUESDAY)
    assert is_operating_day(days, WEDNESDAY)


def test_empty_operating_days_means_every_day():
    for offset in range(7):
        assert is_operating_day([], date(2025, 8, 4 + offset))


def test_normalize_operating_days_dedupes_and_keeps_order():
    assert normalize_operating_days(["miércoles", "Lunes", "MIERCOLES"]) == ["MIERCOLES", "LUNES"]


def test_normalize_operating_days_rejects_unknown_names():
    with pytest.raises(ValueError, match="not a weekday"):
        normalize_operating_days(["LUNES", "Funday"])


def test_display_weekday_restores_accents():
    assert display_weekday("MIERCOLES") == "Miércoles"
    assert display_weekday("sabado") == "Sábado"
    assert display_weekday("LUNES") == "Lunes"


def test_departure_times_keep_configured_order():
    assignment = VesselAssignment(departure_times=["14:00", "06:30", "09:15"], operating_days=[])
    assert departure_times_for(assignment) == ["14:00", "06:30", "09:15"]


def test_weekdays_are_normalized():
    assert all(normalize_weekday(day) == day for day in WEEKDAYS)
