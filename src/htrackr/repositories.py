from __future__ import annotations

from abc import ABC, abstractmethod
from threading import RLock
from typing import Iterable, List, Optional, Set

from loguru import logger

from . import dates
from .dates import Date
from .errors import (
    AlreadyMarkedError,
    DuplicateError,
    HabitError,
    NotFoundError,
    NotMarkedError,
)
from .models import EntryEntity, HabitEntity
from .schemas import HabitCreate, HabitRename, new_habit_id, validate
from .settings import Settings, get_settings


def collect_dates(texts: Iterable[str]) -> Set[Date]:
    """
    Re-parse stored YYYY-MM-DD values, silently dropping any that are not a
    valid date.
    """
    result: Set[Date] = set()
    for text in texts:
        try:
            result.add(dates.parse_strict(text))
        except HabitError as e:
            logger.debug("skipping stored date {!r}: {}", text, e)
    return result


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Abstract repository contract for habit storage backends.

    Every method is an independent unit of work. Name-based methods raise
    NotFoundError when the habit does not exist.
    """

    @abstractmethod
    def create_habit(self, name: str) -> HabitEntity:
        """Create a habit. Raises ValidationError (empty name) or DuplicateError."""

    @abstractmethod
    def delete_habit(self, name: str) -> None:
        """Delete a habit together with all of its completion entries."""

    @abstractmethod
    def rename_habit(self, name: str, new_name: str) -> None:
        """
        Rename a habit in place; its id and entries are unaffected.

        `new_name` is not checked against existing habits, so a rename can
        produce two habits sharing a name.
        """

    @abstractmethod
    def habit_exists(self, name: str) -> bool:
        """Return True if a habit with this name exists."""

    @abstractmethod
    def list_habits(self) -> List[str]:
        """Return all habit names in insertion order."""

    @abstractmethod
    def get_habit_id(self, name: str) -> str:
        """Return the identifier of the named habit."""

    @abstractmethod
    def mark(self, name: str, date: Date) -> None:
        """Record a completion. Raises AlreadyMarkedError if already present."""

    @abstractmethod
    def unmark(self, name: str, date: Date) -> None:
        """Remove a completion. Raises NotMarkedError if absent."""

    @abstractmethod
    def marked_days(self, name: str, date_start: Date, date_end: Date) -> Set[Date]:
        """
        Return the marked dates of a habit within [date_start, date_end].
        - Both bounds are inclusive
        - Stored values that no longer parse as a valid date are skipped
        """

    def close(self) -> None:
        """Release any resources held by the backend."""

    def __enter__(self) -> "Repository":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and throwaway runs.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._habits: List[HabitEntity] = []
        self._entries: List[EntryEntity] = []

    def _find(self, name: str) -> Optional[HabitEntity]:
        for habit in self._habits:
            if habit["name"] == name:
                return habit
        return None

    def _require(self, name: str) -> HabitEntity:
        habit = self._find(name)
        if habit is None:
            raise NotFoundError(f"habit {name} not found")
        return habit

    def _has_entry(self, habit_id: str, day: str) -> bool:
        return any(e["habit_id"] == habit_id and e["date"] == day for e in self._entries)

    def create_habit(self, name: str) -> HabitEntity:
        with self._lock:
            if self._find(name) is not None:
                raise DuplicateError("habit already exists")
            data = validate(HabitCreate, name=name)
            entity: HabitEntity = {"id": new_habit_id(), "name": data.name}
            self._habits.append(entity)
            return entity.copy()  # type: ignore[return-value]

    def delete_habit(self, name: str) -> None:
        with self._lock:
            habit = self._require(name)
            self._entries = [e for e in self._entries if e["habit_id"] != habit["id"]]
            self._habits = [h for h in self._habits if h["id"] != habit["id"]]

    def rename_habit(self, name: str, new_name: str) -> None:
        with self._lock:
            habit = self._require(name)
            data = validate(HabitRename, name=name, new_name=new_name)
            habit["name"] = data.new_name

    def habit_exists(self, name: str) -> bool:
        with self._lock:
            return self._find(name) is not None

    def list_habits(self) -> List[str]:
        with self._lock:
            return [h["name"] for h in self._habits]

    def get_habit_id(self, name: str) -> str:
        with self._lock:
            return self._require(name)["id"]

    def mark(self, name: str, date: Date) -> None:
        day = dates.format(date)
        with self._lock:
            habit_id = self._require(name)["id"]
            if self._has_entry(habit_id, day):
                raise AlreadyMarkedError(f"habit {name} already marked for {day} date")
            self._entries.append({"habit_id": habit_id, "date": day})

    def unmark(self, name: str, date: Date) -> None:
        day = dates.format(date)
        with self._lock:
            habit_id = self._require(name)["id"]
            if not self._has_entry(habit_id, day):
                raise NotMarkedError(f"habit {name} is not marked for {day} date")
            self._entries = [
                e for e in self._entries if not (e["habit_id"] == habit_id and e["date"] == day)
            ]

    def marked_days(self, name: str, date_start: Date, date_end: Date) -> Set[Date]:
        start = dates.format(date_start)
        end = dates.format(date_end)
        with self._lock:
            habit_id = self._require(name)["id"]
            # Text comparison, same as the sqlite BETWEEN on stored values
            texts = [
                e["date"] for e in self._entries if e["habit_id"] == habit_id and start <= e["date"] <= end
            ]
        return collect_dates(texts)


# PUBLIC_INTERFACE
def get_repository(settings: Optional[Settings] = None) -> Repository:
    """
    Factory to return the configured repository based on settings.
    - sqlite: SQLiteRepository backed by settings.db_path (default)
    - memory: InMemoryRepository, nothing survives the process
    """
    settings = settings or get_settings()
    if settings.backend == "memory":
        logger.debug("using in-memory habit storage")
        return InMemoryRepository()

    from .db import SQLiteRepository

    logger.debug("using sqlite habit storage at {}", settings.db_path)
    return SQLiteRepository(settings.db_path)
