from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, List, Optional, Set

from loguru import logger

from . import dates
from .dates import Date
from .errors import (
    AlreadyMarkedError,
    DuplicateError,
    NotFoundError,
    NotMarkedError,
    StorageError,
)
from .models import HabitEntity
from .repositories import Repository, collect_dates
from .schemas import HabitCreate, HabitRename, new_habit_id, validate


@dataclass(frozen=True)
class _HabitCols:
    table: str = "habits"
    id: str = "id"
    name: str = "name"


@dataclass(frozen=True)
class _EntryCols:
    table: str = "habit_entries"
    habit_id: str = "habit_id"
    date: str = "date"


_H = _HabitCols()
_E = _EntryCols()


class SQLiteRepository(Repository):
    """
    SQLite repository implementing the Repository interface.

    A single connection is held for the lifetime of the repository; each
    public method commits its own work.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        try:
            if db_path != ":memory:":
                os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
            self._connection: Optional[sqlite3.Connection] = sqlite3.connect(db_path)
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"failed to open {db_path}: {e}") from e
        self._connection.row_factory = sqlite3.Row
        try:
            self._init_db()
        except StorageError:
            self.close()
            raise

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        if self._connection is None:
            raise StorageError("storage is closed")
        conn = self._connection
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(str(e)) from e
        except Exception:
            conn.rollback()
            raise

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_H.table} (
                    {_H.id} VARCHAR(255) PRIMARY KEY,
                    {_H.name} VARCHAR(255)
                )
                """
            )
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_E.table} (
                    {_E.habit_id} VARCHAR(255),
                    {_E.date} DATE,
                    FOREIGN KEY ({_E.habit_id}) REFERENCES {_H.table}({_H.id})
                )
                """
            )

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def _row_to_entity(self, row: sqlite3.Row) -> HabitEntity:
        return {"id": str(row[_H.id]), "name": str(row[_H.name])}

    def _get(self, conn: sqlite3.Connection, name: str) -> Optional[HabitEntity]:
        row = conn.execute(
            f"SELECT {_H.id}, {_H.name} FROM {_H.table} WHERE {_H.name} = ?", (name,)
        ).fetchone()
        return self._row_to_entity(row) if row else None

    def _require_id(self, conn: sqlite3.Connection, name: str) -> str:
        habit = self._get(conn, name)
        if habit is None:
            raise NotFoundError(f"habit {name} not found")
        return habit["id"]

    def _entry_count(self, conn: sqlite3.Connection, habit_id: str, day: str) -> int:
        row = conn.execute(
            f"SELECT COUNT(1) AS cnt FROM {_E.table} WHERE {_E.habit_id} = ? AND {_E.date} = ?",
            (habit_id, day),
        ).fetchone()
        return int(row["cnt"]) if row else 0

    def create_habit(self, name: str) -> HabitEntity:
        if self.habit_exists(name):
            raise DuplicateError("habit already exists")
        data = validate(HabitCreate, name=name)
        entity: HabitEntity = {"id": new_habit_id(), "name": data.name}
        with self._conn() as conn:
            conn.execute(
                f"INSERT INTO {_H.table} ({_H.id}, {_H.name}) VALUES (?, ?)",
                (entity["id"], entity["name"]),
            )
        logger.debug("created habit {} ({})", entity["name"], entity["id"])
        return entity

    def delete_habit(self, name: str) -> None:
        with self._conn() as conn:
            habit_id = self._require_id(conn, name)
        # Entries go first so no entry ever points at a missing habit
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_E.table} WHERE {_E.habit_id} = ?", (habit_id,))
            removed = cur.rowcount
        with self._conn() as conn:
            conn.execute(f"DELETE FROM {_H.table} WHERE {_H.id} = ?", (habit_id,))
        logger.debug("deleted habit {} and {} entries", name, removed)

    def rename_habit(self, name: str, new_name: str) -> None:
        if not self.habit_exists(name):
            raise NotFoundError(f"habit {name} not found")
        data = validate(HabitRename, name=name, new_name=new_name)
        with self._conn() as conn:
            conn.execute(
                f"UPDATE {_H.table} SET {_H.name} = ? WHERE {_H.name} = ?", (data.new_name, name)
            )
        logger.debug("renamed habit {} to {}", name, data.new_name)

    def habit_exists(self, name: str) -> bool:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT COUNT(1) AS cnt FROM {_H.table} WHERE {_H.name} = ?", (name,)
            ).fetchone()
            return bool(row and row["cnt"] > 0)

    def list_habits(self) -> List[str]:
        with self._conn() as conn:
            rows = conn.execute(f"SELECT {_H.name} FROM {_H.table} ORDER BY rowid").fetchall()
            return [str(r[_H.name]) for r in rows]

    def get_habit_id(self, name: str) -> str:
        with self._conn() as conn:
            return self._require_id(conn, name)

    def mark(self, name: str, date: Date) -> None:
        day = dates.format(date)
        with self._conn() as conn:
            habit_id = self._require_id(conn, name)
            if self._entry_count(conn, habit_id, day) > 0:
                raise AlreadyMarkedError(f"habit {name} already marked for {day} date")
            conn.execute(
                f"INSERT INTO {_E.table} ({_E.habit_id}, {_E.date}) VALUES (?, ?)", (habit_id, day)
            )
        logger.debug("marked {} on {}", name, day)

    def unmark(self, name: str, date: Date) -> None:
        day = dates.format(date)
        with self._conn() as conn:
            habit_id = self._require_id(conn, name)
            if self._entry_count(conn, habit_id, day) == 0:
                raise NotMarkedError(f"habit {name} is not marked for {day} date")
            conn.execute(
                f"DELETE FROM {_E.table} WHERE {_E.habit_id} = ? AND {_E.date} = ?", (habit_id, day)
            )
        logger.debug("unmarked {} on {}", name, day)

    def marked_days(self, name: str, date_start: Date, date_end: Date) -> Set[Date]:
        start = dates.format(date_start)
        end = dates.format(date_end)
        with self._conn() as conn:
            habit_id = self._require_id(conn, name)
            rows = conn.execute(
                f"""
                SELECT {_E.date} FROM {_E.table}
                WHERE {_E.habit_id} = ? AND {_E.date} BETWEEN ? AND ?
                """,
                (habit_id, start, end),
            ).fetchall()
        return collect_dates(str(r[_E.date]) for r in rows)
