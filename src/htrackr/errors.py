from __future__ import annotations


# PUBLIC_INTERFACE
class HabitError(Exception):
    """
    Base class for every failure surfaced by htrackr.

    Each subclass carries a stable `kind` tag so callers can branch on the
    failure category without inspecting message text.
    """

    kind: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ParseError(HabitError):
    """Malformed date text or malformed numeric field."""

    kind = "parse"


class ValidationError(HabitError):
    """Well-formed input that is semantically invalid (empty name, impossible date)."""

    kind = "validation"


class InvalidDateError(ParseError, ValidationError):
    """
    A structurally correct date that does not exist on the calendar.

    Raised by both parsing and formatting, so it is catchable as either
    ParseError or ValidationError.
    """

    kind = "invalid_date"


class NotFoundError(HabitError):
    """Referenced habit does not exist."""

    kind = "not_found"


class DuplicateError(HabitError):
    """Habit name collision on create."""

    kind = "duplicate"


class AlreadyMarkedError(HabitError):
    kind = "already_marked"


class NotMarkedError(HabitError):
    kind = "not_marked"


class StorageError(HabitError):
    """Wraps any failure raised by the underlying database driver."""

    kind = "storage"
