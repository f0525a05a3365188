"""Shared validation helpers."""

import re
from datetime import date

_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
_INTEGER_RE = re.compile(r'^[+-]?\d+$')


def is_valid_email(value: str) -> bool:
    """Return True if *value* looks like a valid email address."""
    return bool(value and _EMAIL_RE.match(value.strip()))


def is_integer(value) -> bool:
    """Return True if *value* is an int or a string holding only an integer."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return bool(value and _INTEGER_RE.match(str(value).strip()))


def years_before(day: date, years: int) -> date:
    """Return the date *years* years before *day*.

    February 29th maps to February 28th in a non-leap target year.
    """
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def parse_date(value):
    """Parse an ISO ``YYYY-MM-DD`` string; dates pass through, blanks give None."""
    if value is None or isinstance(value, date):
        return value
    value = str(value).strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None
