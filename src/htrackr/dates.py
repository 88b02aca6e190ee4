from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass

from .errors import InvalidDateError, ParseError

# Literals accepted by parse() in place of a YYYY-MM-DD string
YESTERDAY_LITERALS = ("yesterday", "y")

_DAYS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


# PUBLIC_INTERFACE
@dataclass(frozen=True, order=True)
class Date:
    """
    A calendar date as plain year/month/day fields.

    Construction does not validate; validity is computed on demand by
    is_valid() and enforced by format() and every storage call.
    """

    year: int
    month: int
    day: int

    @classmethod
    def from_date(cls, value: _dt.date) -> "Date":
        return cls(value.year, value.month, value.day)

    def to_date(self) -> _dt.date:
        return _dt.date(self.year, self.month, self.day)

    def is_valid(self) -> bool:
        return is_valid(self)

    def __str__(self) -> str:
        return f"{self.year:04}-{self.month:02}-{self.day:02}"


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


# PUBLIC_INTERFACE
def days_in_month(year: int, month: int) -> int:
    """
    Return the number of days in the given month of the Gregorian calendar.

    Months outside 1..12 yield 0.
    """
    if month < 1 or month > 12:
        return 0
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS[month - 1]


# PUBLIC_INTERFACE
def is_valid(date: Date) -> bool:
    """Return True when year >= 1, month is 1..12 and day exists in that month."""
    if date.year < 1:
        return False
    if date.month < 1 or date.month > 12:
        return False
    return 1 <= date.day <= days_in_month(date.year, date.month)


def _parse_field(value: str, width: int, label: str, pattern: str) -> int:
    if len(value) != width:
        raise ParseError(f"failed to parse {label} {value!r}, expected {pattern}")
    if not (value.isascii() and value.isdigit()):
        raise ParseError(f"failed to parse {label} {value!r}, not a number")
    return int(value)


# PUBLIC_INTERFACE
def parse(text: str) -> Date:
    """
    Parse a strict YYYY-MM-DD string into a Date.

    The literals 'yesterday' and 'y' resolve to the local date one day before
    today.

    Raises:
        ParseError: wrong number of components, wrong field width or a
            non-numeric field.
        InvalidDateError: the fields are well formed but the date does not
            exist (e.g. 2006-02-30).
    """
    value = text.strip()
    if value in YESTERDAY_LITERALS:
        return yesterday()
    return parse_strict(value)


def parse_strict(text: str) -> Date:
    """Parse YYYY-MM-DD only; the yesterday literals are not recognized."""
    parts = text.strip().split("-", 2)
    if len(parts) != 3:
        raise ParseError(f"failed to parse date {text!r}, expected YYYY-MM-DD format")

    year = _parse_field(parts[0], 4, "year", "YYYY")
    month = _parse_field(parts[1], 2, "month", "MM")
    day = _parse_field(parts[2], 2, "day", "DD")

    result = Date(year, month, day)
    if not result.is_valid():
        raise InvalidDateError(f"invalid date {text!r}")
    return result


# PUBLIC_INTERFACE
def parse_month(text: str) -> Date:
    """Parse a YYYY-MM month argument into the first day of that month."""
    return parse(f"{text.strip()}-01")


# PUBLIC_INTERFACE
def format(date: Date) -> str:  # noqa: A001
    """
    Render a Date as zero-padded YYYY-MM-DD.

    Validity is recomputed here; an impossible date raises InvalidDateError.
    """
    result = str(date)
    if not is_valid(date):
        raise InvalidDateError(f"invalid date {result}")
    return result


# PUBLIC_INTERFACE
def today() -> Date:
    """Return the current local calendar date."""
    return Date.from_date(_dt.date.today())


def yesterday() -> Date:
    return Date.from_date(_dt.date.today() - _dt.timedelta(days=1))
