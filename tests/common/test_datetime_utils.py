from __future__ import annotations

from datetime import date, time

import pytest

from src.workforce_tracker.workforce_tracker.common.datetime_utils import (
    parse_clock_time,
    parse_iso_date,
    parse_optional_date,
    validate_range,
)
from src.workforce_tracker.workforce_tracker.common.validators import optional_latitude, optional_longitude
from src.workforce_tracker.workforce_tracker.core.exceptions import ValidationError


def test_parse_iso_date():
    assert parse_iso_date(" 2026-02-28 ") == date(2026, 2, 28)
    with pytest.raises(ValidationError):
        parse_iso_date("28/02/2026")


def test_blank_optional_date_is_none():
    assert parse_optional_date("") is None
    assert parse_optional_date(None) is None


@pytest.mark.parametrize("raw, expected", [("09:00", time(9, 0)), ("17:45:30", time(17, 45, 30)), ("", None)])
def test_parse_clock_time(raw, expected):
    assert parse_clock_time(raw) == expected


def test_parse_clock_time_rejects_garbage():
    with pytest.raises(ValidationError):
        parse_clock_time("25:99")


def test_validate_range():
    validate_range(date(2026, 1, 1), date(2026, 1, 1))
    validate_range(None, date(2026, 1, 1))
    with pytest.raises(ValidationError):
        validate_range(date(2026, 1, 2), date(2026, 1, 1))


def test_coordinates():
    assert optional_latitude("10.5") == 10.5
    assert optional_longitude(" ") is None
    with pytest.raises(ValidationError):
        optional_latitude("91")
    with pytest.raises(ValidationError):
        optional_longitude("east")


@pytest.mark.parametrize("parse", [parse_iso_date, parse_optional_date, parse_clock_time])
def test_non_string_values_are_validation_errors(parse):
    with pytest.raises(ValidationError):
        parse(20260401)
    with pytest.raises(ValidationError):
        parse(True)
