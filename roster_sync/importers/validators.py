from __future__ import annotations

import re
from datetime import date

from ..models.enums import ProfileLifecycleStatus

"""Field validators and normalizers for CSV imports.

Every helper takes the raw cell text and a shared ``errors`` list. Problems
are appended to the list and the helper returns a neutral value (None or the
default) so that one pass over a row reports every problem at once.
"""

__all__ = [
    "EMAIL_PATTERN",
    "normalize_email",
    "is_valid_email",
    "optional_string",
    "optional_email",
    "optional_boolean",
    "optional_date",
    "parse_status",
    "build_full_name",
]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
FLEX_DATE_PATTERN = re.compile(r"^(\d{1,2})\s*[/\-.,]\s*(\d{1,2})\s*[/\-.,]\s*(\d{4})$")

TRUE_TOKENS = frozenset({"yes", "y", "true", "t", "1"})
FALSE_TOKENS = frozenset({"no", "n", "false", "f", "0"})
UNKNOWN_TOKENS = frozenset({"unknown", "na", "n/a", "null"})


def normalize_email(value: str | None) -> str | None:
    """Trim and lowercase. Blank input means "absent" and returns None."""
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    return normalized or None


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.match(value) is not None


def optional_string(value: str | None) -> str | None:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def optional_email(value: str | None, errors: list[str], label: str) -> str | None:
    normalized = normalize_email(value)
    if normalized is None:
        return None
    if not is_valid_email(normalized):
        errors.append(f"{label} must be a valid email address.")
        return None
    return normalized


def optional_boolean(value: str | None, errors: list[str], label: str) -> bool | None:
    """Parse a yes/no/unknown cell. Blank and unknown-like tokens are None."""
    if not value:
        return None
    normalized = value.strip().lower()
    if not normalized:
        return None
    if normalized in TRUE_TOKENS:
        return True
    if normalized in FALSE_TOKENS:
        return False
    if normalized in UNKNOWN_TOKENS:
        return None
    errors.append(f"{label} must be one of: yes/no/unknown.")
    return None


def optional_date(value: str | None, errors: list[str]) -> str | None:
    """Normalize a date cell to ISO ``YYYY-MM-DD``.

    ISO input passes through unchanged. Day-first input such as ``5/3/2012``,
    ``05-03-2012`` or ``5 . 3 . 2012`` must name a real calendar day.
    """
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    if ISO_DATE_PATTERN.match(trimmed):
        return trimmed

    match = FLEX_DATE_PATTERN.match(trimmed)
    if match:
        day, month, year = (int(part) for part in match.groups())
        try:
            parsed = date(year, month, day)
        except ValueError:
            parsed = None
        # Round trip guards against any silent normalization of the triple
        if parsed is not None and (parsed.year, parsed.month, parsed.day) == (year, month, day):
            return parsed.isoformat()

    errors.append(f"Dates must use DD/MM/YYYY format (received: {value}).")
    return None


def parse_status(value: str | None, errors: list[str]) -> ProfileLifecycleStatus:
    """Match a lifecycle status name case-insensitively; blank means ACTIVE."""
    if not value:
        return ProfileLifecycleStatus.ACTIVE
    normalized = value.strip().upper()
    if not normalized:
        return ProfileLifecycleStatus.ACTIVE
    try:
        return ProfileLifecycleStatus[normalized]
    except KeyError:
        errors.append(f"Invalid status value: {value}")
        return ProfileLifecycleStatus.ACTIVE


def build_full_name(first_name: str | None, last_name: str | None) -> str | None:
    parts = [part.strip() for part in (first_name, last_name) if part and part.strip()]
    if not parts:
        return None
    return " ".join(parts)
