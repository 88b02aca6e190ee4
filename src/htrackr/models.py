from __future__ import annotations

from typing import TypedDict

# Prefix of every generated habit identifier
HABIT_ID_PREFIX = "hbt_"


# PUBLIC_INTERFACE
class HabitEntity(TypedDict):
    """
    A lightweight domain model representing a Habit row.

    Fields:
    - id: Opaque identifier, 'hbt_' followed by a random UUID4; stable across renames
    - name: Unique, non-empty display name
    """

    id: str
    name: str


class EntryEntity(TypedDict):
    """
    A completion entry: the habit was done on `date`.

    `date` holds the persisted YYYY-MM-DD text, not a parsed Date.
    """

    habit_id: str
    date: str
