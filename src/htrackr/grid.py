from __future__ import annotations

from typing import Collection, List, Optional, Sequence

from loguru import logger

from .dates import Date, days_in_month
from .errors import HabitError
from .repositories import Repository

# Separator between the name column and the day cells
SEPARATOR = "| "
MARK = "X"
EMPTY = " "


def month_label(year: int, month: int) -> str:
    return f"{year:04}-{month:02}"


def column_width(label: str, names: Sequence[str]) -> int:
    """Left column width shared by the header and every habit row."""
    return max([len(label) + 2, *(len(n) for n in names)])


def header_line(label: str, width: int, num_days: int) -> str:
    """Month label followed by a repeating 1..9,0 day ruler."""
    ruler = "".join(str(day % 10) for day in range(1, num_days + 1))
    return f"{label.ljust(width)}{SEPARATOR}{ruler}"


def habit_line(name: str, width: int, num_days: int, marked: Collection[int]) -> str:
    cells = "".join(MARK if day in marked else EMPTY for day in range(1, num_days + 1))
    return f"{name.ljust(width)}{SEPARATOR}{cells}"


# PUBLIC_INTERFACE
def render_month(repo: Repository, year: int, month: int, names: Optional[Sequence[str]] = None) -> List[str]:
    """
    Build the monthly grid of marked days, one line per habit.

    Args:
        repo: Storage to read habits and completion entries from.
        year: Target year.
        month: Target month (1..12).
        names: Habits to show, in display order. Defaults to every habit.

    Returns:
        The header line followed by one line per habit. A habit whose query
        fails is shown as 'error <message>' and the remaining habits are
        still rendered.
    """
    habit_names = list(repo.list_habits() if names is None else names)
    num_days = days_in_month(year, month)
    label = month_label(year, month)
    width = column_width(label, habit_names)

    start = Date(year, month, 1)
    end = Date(year, month, num_days)

    lines = [header_line(label, width, num_days)]
    for name in habit_names:
        try:
            days = repo.marked_days(name, start, end)
        except HabitError as e:
            logger.debug("listing {} failed: {}", name, e)
            lines.append(f"error {e}")
            continue
        lines.append(habit_line(name, width, num_days, {d.day for d in days}))
    return lines
