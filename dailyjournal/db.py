# -*- coding: utf-8 -*-
"""SQLite schema and async data access for DailyJournal."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import asyncio
import logging

import aiosqlite

logger = logging.getLogger(__name__)

ENTRY_COLUMNS = (
    "id",
    "entry_date",
    "title",
    "content",
    "primary_mood",
    "secondary_moods_json",
    "tags_json",
    "category",
    "created_at",
    "updated_at",
)


# ---------------------------------------------------------------------
# Base schema (new installs)
# ---------------------------------------------------------------------

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS journal_entries (
    id                    TEXT PRIMARY KEY,
    entry_date            TEXT NOT NULL,
    title                 TEXT NOT NULL,
    content               TEXT NOT NULL,
    primary_mood          TEXT NOT NULL,
    secondary_moods_json  TEXT NOT NULL DEFAULT '[]',
    tags_json             TEXT NOT NULL DEFAULT '[]',
    category              TEXT NOT NULL DEFAULT '',
    created_at            TEXT NOT NULL,
    updated_at            TEXT NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_entries_entry_date ON journal_entries(entry_date);
"""


# ---------------------------------------------------------------------
# Migrations (existing installs)
# ---------------------------------------------------------------------

LATE_COLUMNS = {
    "secondary_moods_json": "ALTER TABLE journal_entries ADD COLUMN secondary_moods_json TEXT NOT NULL DEFAULT '[]';",
    "tags_json": "ALTER TABLE journal_entries ADD COLUMN tags_json TEXT NOT NULL DEFAULT '[]';",
    "category": "ALTER TABLE journal_entries ADD COLUMN category TEXT NOT NULL DEFAULT '';",
}


async def _column_exists(db: aiosqlite.Connection, table: str, column: str) -> bool:
    """Return True if `column` is present in `table`."""
    cur = await db.execute(f"PRAGMA table_info({table})")
    rows = await cur.fetchall()
    await cur.close()
    # PRAGMA table_info columns: cid, name, type, notnull, default_value, pk
    return any(len(r) >= 2 and r[1] == column for r in rows)


async def migrate_db(db: aiosqlite.Connection) -> List[str]:
    """Idempotently add list/category columns missing from older databases.

    Returns the names of the columns that were added.
    """
    added = []
    for column, stmt in LATE_COLUMNS.items():
        if not await _column_exists(db, "journal_entries", column):
            await db.execute(stmt)
            added.append(column)
    if added:
        await db.commit()
        logger.info("Migrated journal_entries: added %s", ", ".join(added))
    return added


# ---------------------------------------------------------------------
# Connection / initialization
# ---------------------------------------------------------------------

class Database:
    """Owns the single SQLite connection used by an entry store.

    The connection is opened lazily on first use. Concurrent first callers
    wait on ``_init_lock`` so the schema is created exactly once.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = str(path)
        self._conn: Optional[aiosqlite.Connection] = None
        self._init_lock = asyncio.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Open the connection, create tables and run migrations once."""
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            if self.path != ":memory:":
                Path(self.path).expanduser().parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(self.path)
            try:
                conn.row_factory = aiosqlite.Row
                await conn.executescript(SCHEMA_SQL)
                await conn.commit()
                await migrate_db(conn)
            except aiosqlite.Error:
                await conn.close()
                logger.exception("Failed to initialize journal database at %s", self.path)
                raise
            self._conn = conn
            self._initialized = True
            logger.info("Opened journal database at %s", self.path)

    async def connection(self) -> aiosqlite.Connection:
        await self.initialize()
        if self._conn is None:
            raise RuntimeError(f"Journal database at {self.path} was closed during use")
        return self._conn

    async def close(self) -> None:
        """Close the connection; a later call re-opens it lazily."""
        async with self._init_lock:
            if self._conn is not None:
                await self._conn.close()
                self._conn = None
            self._initialized = False

    async def __aenter__(self) -> "Database":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # -----------------------------------------------------------------
    # Entries
    # -----------------------------------------------------------------

    async def insert_entry_row(self, row: Dict[str, Any]) -> None:
        """Insert a fully-formed entry row (all ENTRY_COLUMNS present)."""
        db = await self.connection()
        placeholders = ", ".join("?" for _ in ENTRY_COLUMNS)
        await db.execute(
            f"INSERT INTO journal_entries ({', '.join(ENTRY_COLUMNS)}) VALUES ({placeholders})",
            tuple(row[c] for c in ENTRY_COLUMNS),
        )
        await db.commit()

    async def get_entry_row(self, entry_id: str) -> Optional[aiosqlite.Row]:
        """Fetch an entry row by id; returns Row or None."""
        db = await self.connection()
        cur = await db.execute("SELECT * FROM journal_entries WHERE id = ?", (entry_id,))
        row = await cur.fetchone()
        await cur.close()
        return row

    async def get_entry_row_by_date(self, date_key: str) -> Optional[aiosqlite.Row]:
        """Fetch the entry row stored under *date_key* (``yyyy-MM-dd``)."""
        db = await self.connection()
        cur = await db.execute("SELECT * FROM journal_entries WHERE entry_date = ?", (date_key,))
        row = await cur.fetchone()
        await cur.close()
        return row

    async def find_date_conflict(self, date_key: str, exclude_id: str) -> Optional[str]:
        """Return the id of another entry holding *date_key*, if any."""
        db = await self.connection()
        cur = await db.execute(
            "SELECT id FROM journal_entries WHERE entry_date = ? AND id != ?",
            (date_key, exclude_id),
        )
        row = await cur.fetchone()
        await cur.close()
        return row["id"] if row else None

    async def list_entry_rows(self) -> List[aiosqlite.Row]:
        """Return all entry rows, newest entry date first."""
        db = await self.connection()
        cur = await db.execute(
            """
            SELECT *
              FROM journal_entries
             ORDER BY entry_date DESC
            """
        )
        rows = await cur.fetchall()
        await cur.close()
        return list(rows)

    async def update_entry_row(self, row: Dict[str, Any]) -> None:
        """Replace every mutable column of the row identified by ``row['id']``.

        ``created_at`` is never rewritten.
        """
        db = await self.connection()
        await db.execute(
            """
            UPDATE journal_entries
               SET entry_date = ?,
                   title = ?,
                   content = ?,
                   primary_mood = ?,
                   secondary_moods_json = ?,
                   tags_json = ?,
                   category = ?,
                   updated_at = ?
             WHERE id = ?
            """,
            (
                row["entry_date"],
                row["title"],
                row["content"],
                row["primary_mood"],
                row["secondary_moods_json"],
                row["tags_json"],
                row["category"],
                row["updated_at"],
                row["id"],
            ),
        )
        await db.commit()

    async def delete_entry_row(self, entry_id: str) -> bool:
        """Delete an entry; return True if a row was removed."""
        db = await self.connection()
        cur = await db.execute("DELETE FROM journal_entries WHERE id = ?", (entry_id,))
        removed = cur.rowcount
        await cur.close()
        await db.commit()
        return removed > 0

    async def count_entries(self) -> int:
        db = await self.connection()
        cur = await db.execute("SELECT COUNT(*) FROM journal_entries")
        row = await cur.fetchone()
        await cur.close()
        return int(row[0]) if row else 0
