"""Parsing of the textual formats accepted at the desk (DD/MM/YYYY dates, HHMM times, 11 digit identifiers)."""

import re
from datetime import datetime, date, time
from typing import Optional

IDENTIFIER_PATTERN = re.compile(r"[0-9]{3}\.[0-9]{3}\.[0-9]{3}-[0-9]{2}")
_LOOSE_IDENTIFIER = re.compile(r"([0-9]{3})\.?([0-9]{3})\.?([0-9]{3})-?([0-9]{2})")
_DATE_PATTERN = re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4}")
_CLOCK_PATTERN = re.compile(r"[0-9]{4}")


def normalize_identifier(raw: str) -> str:
    """
    Rewrite an 11 digit identifier into ###.###.###-## form.
    Input that is not an 11 digit identifier is returned stripped but otherwise untouched,
    so it fails IDENTIFIER_PATTERN downstream.
    """
    value = (raw or "").strip()
    match = _LOOSE_IDENTIFIER.fullmatch(value)
    if not match:
        return value
    return "{}.{}.{}-{}".format(*match.groups())


def is_valid_identifier(identifier: str) -> bool:
    return bool(IDENTIFIER_PATTERN.fullmatch(identifier))


def is_clock_format(value: str) -> bool:
    return bool(_CLOCK_PATTERN.fullmatch(value or ""))


def parse_clinic_date(value: str) -> Optional[date]:
    if not _DATE_PATTERN.fullmatch(value or ""):
        return None
    try:
        return datetime.strptime(value, "%d/%m/%Y").date()
    except ValueError:
        return None


def parse_clock_time(value: str) -> Optional[time]:
    if not is_clock_format(value):
        return None
    try:
        return datetime.strptime(value, "%H%M").time()
    except ValueError:
        return None


def format_clinic_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")
