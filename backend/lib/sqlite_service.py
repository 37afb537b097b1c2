"""
=============================================================================
SQLITE SERVICE - Consumption record store
=============================================================================

All readings live in one SQLite table. Rows are only ever appended: there
is no update and no delete.

Our Table Schema:
-----------------
Table: consumption
- id (INTEGER PRIMARY KEY AUTOINCREMENT) - assigned on insert, never reused
- date (TEXT NOT NULL) - ISO 8601 date supplied by the caller, stored verbatim
- consumption (REAL NOT NULL) - units consumed in the period ending on date

Example Row:
{
    "id": 1,
    "date": "2025-11-01",
    "consumption": 12.5
}

Ordering:
---------
- list_all():    ascending by date (display / chart / bill)
- list_recent(): descending by date, most recent first (prediction)
Rows sharing a date are ordered by id.
=============================================================================
"""

import logging
import math
import sqlite3
import threading
from pathlib import Path
from typing import List

from backend.lib.consumption_core.models import ConsumptionRecord, MAX_CONSUMPTION

logger = logging.getLogger(__name__)

MEMORY = ":memory:"
DEFAULT_DATABASE_PATH = str(Path(__file__).resolve().parent.parent / "data" / "consumption.db")


class StoreError(Exception):
    """Raised for any storage-layer failure; str() is the engine's message."""


class ConsumptionStore:
    """
    Data-access class for consumption readings.

    One connection is opened per store and shared between request threads,
    guarded by a lock. Every statement commits on its own.

    Usage:
        store = ConsumptionStore("backend/data/consumption.db")
        new_id = store.append("2025-11-01", 12.5)
        for r in store.list_all():
            print(f"{r.date}: {r.consumption}")
    """

    def __init__(self, path: str = MEMORY):
        """
        Args:
            path: SQLite database file, or ":memory:" for a throwaway store.
                  Parent folders are created if missing.
        """
        self.path = str(path)
        if self.path != MEMORY:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self.connection = sqlite3.connect(self.path, check_same_thread=False)
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        self.connection.row_factory = sqlite3.Row
        self.create_table_if_not_exists()

    def create_table_if_not_exists(self) -> None:
        """Create the consumption table on first startup. Never migrated."""
        self._execute(
            """CREATE TABLE IF NOT EXISTS consumption (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                date TEXT NOT NULL,
                consumption REAL NOT NULL
            )"""
        )
        logger.info("Consumption table ready at %s", self.path)

    def append(self, date: str, consumption: float) -> int:
        """
        Store one reading and return its new id.

        Raises:
            ValueError: date is empty or not a string, or consumption is not a
                        finite number in [0, MAX_CONSUMPTION]
            StoreError: the insert failed
        """
        if not date:
            raise ValueError("date is required")
        if not isinstance(date, str):
            raise ValueError("date must be a string")
        if isinstance(consumption, bool) or not isinstance(consumption, (int, float)):
            raise ValueError("consumption must be a number")
        try:
            value = float(consumption)
        except OverflowError:
            # a JSON integer with hundreds of digits
            raise ValueError("consumption must be a finite number")
        if not math.isfinite(value):
            raise ValueError("consumption must be a finite number")
        if value < 0:
            raise ValueError("consumption must be >= 0")
        if value > MAX_CONSUMPTION:
            raise ValueError(f"consumption must be <= {MAX_CONSUMPTION:g}")

        new_id = self._execute(
            "INSERT INTO consumption (date, consumption) VALUES (?, ?)",
            (date, value),
        ).lastrowid
        logger.info("Stored reading id=%s date=%s consumption=%s", new_id, date, consumption)
        return new_id

    def list_all(self) -> List[ConsumptionRecord]:
        """Every stored reading, ascending by date."""
        rows = self._query("SELECT id, date, consumption FROM consumption ORDER BY date, id")
        return [self._to_record(row) for row in rows]

    def list_recent(self, n: int) -> List[ConsumptionRecord]:
        """At most n readings, most recent date first."""
        rows = self._query(
            "SELECT id, date, consumption FROM consumption ORDER BY date DESC, id DESC LIMIT ?",
            (n,),
        )
        return [self._to_record(row) for row in rows]

    def close(self) -> None:
        with self._lock:
            self.connection.close()

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        # "with connection" commits the single statement or rolls it back
        with self._lock:
            try:
                with self.connection:
                    return self.connection.execute(sql, params)
            except sqlite3.Error as e:
                logger.error("SQLite error: %s", e)
                raise StoreError(str(e)) from e

    def _query(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        with self._lock:
            try:
                return self.connection.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                logger.error("SQLite error: %s", e)
                raise StoreError(str(e)) from e

    @staticmethod
    def _to_record(row: sqlite3.Row) -> ConsumptionRecord:
        return ConsumptionRecord(id=row["id"], date=row["date"], consumption=row["consumption"])
