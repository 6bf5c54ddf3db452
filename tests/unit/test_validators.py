from __future__ import annotations

from datetime import date, timedelta

import pytest

from roster_sync.importers.validators import (
    build_full_name,
    is_valid_email,
    normalize_email,
    optional_boolean,
    optional_date,
    optional_email,
    optional_string,
    parse_status,
)
from roster_sync.models.enums import ProfileLifecycleStatus


@pytest.mark.parametrize(
    "raw",
    ["Alice@Example.COM", "  bob@x.io ", "not-an-email", "UPPER@CASE.ORG", "a@b"],
)
def test_normalize_email_is_idempotent(raw):
    once = normalize_email(raw)
    assert normalize_email(once) == once


def test_normalize_email_blank_is_absent():
    assert normalize_email("   ") is None
    assert normalize_email(None) is None
    assert normalize_email(" Alice@X.com ") == "alice@x.com"


@pytest.mark.parametrize(
    "value,ok",
    [
        ("a@b.co", True),
        ("first.last@school.example", True),
        ("a@b", False),
        ("a b@c.com", False),
        ("@c.com", False),
        ("a@@c.com", False),
    ],
)
def test_is_valid_email(value, ok):
    assert is_valid_email(value) is ok


def test_optional_string():
    assert optional_string("  x ") == "x"
    assert optional_string("   ") is None
    assert optional_string(None) is None


def test_optional_email_reports_label():
    errors: list[str] = []
    assert optional_email("bad", errors, "Mother email") is None
    assert errors == ["Mother email must be a valid email address."]
    assert optional_email(" MOM@X.COM ", errors, "Mother email") == "mom@x.com"
    assert len(errors) == 1


@pytest.mark.parametrize("token", ["yes", "Y", "true", "T", "1", " YES "])
def test_optional_boolean_true(token):
    errors: list[str] = []
    assert optional_boolean(token, errors, "Flag") is True
    assert errors == []


@pytest.mark.parametrize("token", ["no", "N", "false", "f", "0"])
def test_optional_boolean_false(token):
    errors: list[str] = []
    assert optional_boolean(token, errors, "Flag") is False
    assert errors == []


@pytest.mark.parametrize("token", ["", "  ", "unknown", "NA", "n/a", "null", None])
def test_optional_boolean_unknown(token):
    errors: list[str] = []
    assert optional_boolean(token, errors, "Flag") is None
    assert errors == []


def test_optional_boolean_invalid():
    errors: list[str] = []
    assert optional_boolean("maybe", errors, "Receives social assistance") is None
    assert errors == ["Receives social assistance must be one of: yes/no/unknown."]


def test_optional_date_round_trips_every_day_of_a_leap_year():
    day = date(2012, 1, 1)
    while day.year == 2012:
        for text in (
            f"{day.day}/{day.month}/{day.year}",
            f"{day.day:02d}-{day.month:02d}-{day.year}",
            f"{day.day} . {day.month} . {day.year}",
        ):
            errors: list[str] = []
            assert optional_date(text, errors) == day.isoformat()
            assert errors == []
        day += timedelta(days=1)


def test_optional_date_iso_passthrough():
    errors: list[str] = []
    assert optional_date("2012-03-05", errors) == "2012-03-05"
    assert errors == []


@pytest.mark.parametrize("text", ["31/02/2012", "29/02/2013", "00/01/2012", "12/13/2012", "2012/03/05", "tomorrow"])
def test_optional_date_invalid(text):
    errors: list[str] = []
    assert optional_date(text, errors) is None
    assert errors == [f"Dates must use DD/MM/YYYY format (received: {text})."]


def test_optional_date_blank():
    errors: list[str] = []
    assert optional_date("  ", errors) is None
    assert optional_date(None, errors) is None
    assert errors == []


def test_parse_status():
    errors: list[str] = []
    assert parse_status("", errors) is ProfileLifecycleStatus.ACTIVE
    assert parse_status(" archived ", errors) is ProfileLifecycleStatus.ARCHIVED
    assert parse_status("Draft", errors) is ProfileLifecycleStatus.DRAFT
    assert errors == []
    assert parse_status("retired", errors) is ProfileLifecycleStatus.ACTIVE
    assert errors == ["Invalid status value: retired"]


def test_build_full_name():
    assert build_full_name("Alice", "Smith") == "Alice Smith"
    assert build_full_name(" Alice ", None) == "Alice"
    assert build_full_name(None, "  ") is None
