# -*- coding: utf-8 -*-
"""Entry store: journal entry CRUD on top of the SQLite layer.

Enforces one entry per calendar date, trims and deduplicates fields, and
assigns identities and timestamps. Callers never hand rows to ``db``
directly; everything passes through :class:`EntryStore`.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
import json
import logging
import uuid

import aiosqlite

from .db import Database
from .insights import build_insights
from .models import (
    MAX_SECONDARY_MOODS,
    TITLE_MAX_LEN,
    DuplicateDateError,
    EntryNotFoundError,
    EntryValidationError,
    JournalEntry,
    JournalInsights,
    is_primary_mood,
)

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"

DateLike = Union[date, str]


# ---------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------

def to_date_key(value: Optional[DateLike]) -> str:
    """Normalize a date (or ISO date string) to its ``yyyy-MM-dd`` key."""
    if value is None:
        raise EntryValidationError("Entry date is required")
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, str):
        try:
            value = datetime.strptime(value.strip(), DATE_FORMAT).date()
        except ValueError as exc:
            raise EntryValidationError(f"Invalid entry date: {value!r}") from exc
    return value.isoformat()


def from_date_key(key: str) -> date:
    return date.fromisoformat(key)


def normalize_list(items: Optional[Iterable[Optional[str]]], max_items: Optional[int] = None) -> List[str]:
    """Trim, drop blanks and dedupe case-insensitively, keeping first occurrences."""
    out: List[str] = []
    seen = set()
    for item in items or ():
        if item is None or not item.strip():
            continue
        item = item.strip()
        key = item.casefold()
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    if max_items is not None:
        out = out[:max_items]
    return out


def serialize_list(items: Iterable[str]) -> str:
    return json.dumps(list(items))


def deserialize_list(raw: Optional[str]) -> List[str]:
    """Decode a JSON string array; malformed data yields an empty list."""
    if not raw or not raw.strip():
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Discarding malformed list column value")
        return []
    if not isinstance(data, list):
        logger.warning("Discarding non-list column value")
        return []
    return [str(item) for item in data if isinstance(item, str)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalized_fields(entry: JournalEntry) -> Dict[str, Any]:
    """Validate *entry* and return the column values shared by insert/update."""
    title = (entry.title or "").strip()
    content = (entry.content or "").strip()
    primary_mood = (entry.primary_mood or "").strip()

    if not title:
        raise EntryValidationError("Title is required")
    if len(title) > TITLE_MAX_LEN:
        raise EntryValidationError(f"Title cannot exceed {TITLE_MAX_LEN} characters")
    if not content:
        raise EntryValidationError("Content is required")
    if not primary_mood:
        raise EntryValidationError("Primary mood is required")
    if not is_primary_mood(primary_mood):
        raise EntryValidationError(f"Unknown primary mood: {primary_mood}")

    return {
        "entry_date": to_date_key(entry.entry_date),
        "title": title,
        "content": content,
        "primary_mood": primary_mood,
        "secondary_moods_json": serialize_list(normalize_list(entry.secondary_moods, MAX_SECONDARY_MOODS)),
        "tags_json": serialize_list(normalize_list(entry.tags)),
        "category": (entry.category or "").strip(),
    }


def row_to_entry(row: Mapping[str, Any]) -> JournalEntry:
    """Map a stored row (or row dict) back to a :class:`JournalEntry`."""
    return JournalEntry(
        id=row["id"],
        title=row["title"],
        content=row["content"],
        entry_date=from_date_key(row["entry_date"]),
        primary_mood=row["primary_mood"],
        secondary_moods=deserialize_list(row["secondary_moods_json"]),
        tags=deserialize_list(row["tags_json"]),
        category=row["category"] or "",
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


# ---------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------

class EntryStore:
    """CRUD and queries for journal entries; owns one :class:`Database`.

    The store does not know about the credential gate. Locking is enforced
    by whoever hands the store to the UI.
    """

    def __init__(self, database: Database):
        self.db = database

    async def initialize(self) -> None:
        await self.db.initialize()

    async def close(self) -> None:
        await self.db.close()

    async def __aenter__(self) -> "EntryStore":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # -----------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------

    async def create_entry(self, entry: JournalEntry) -> JournalEntry:
        """Store a new entry; its ``id`` and timestamps are replaced.

        Raises DuplicateDateError if the date is already taken.
        """
        fields = _normalized_fields(entry)
        if await self.db.get_entry_row_by_date(fields["entry_date"]) is not None:
            raise DuplicateDateError(from_date_key(fields["entry_date"]))

        now = _utcnow().isoformat()
        row = dict(fields, id=str(uuid.uuid4()), created_at=now, updated_at=now)
        try:
            await self.db.insert_entry_row(row)
        except aiosqlite.IntegrityError as exc:
            raise DuplicateDateError(from_date_key(fields["entry_date"])) from exc
        logger.debug("Created entry %s for %s", row["id"], row["entry_date"])
        return row_to_entry(row)

    async def update_entry(self, entry: JournalEntry) -> JournalEntry:
        """Replace every field of an existing entry except identity and ``created_at``.

        Raises EntryNotFoundError for an unknown id and DuplicateDateError
        if the new date belongs to another entry.
        """
        fields = _normalized_fields(entry)
        existing = await self.db.get_entry_row(entry.id) if entry.id else None
        if existing is None:
            raise EntryNotFoundError(str(entry.id))

        if existing["entry_date"] != fields["entry_date"]:
            if await self.db.find_date_conflict(fields["entry_date"], existing["id"]):
                raise DuplicateDateError(from_date_key(fields["entry_date"]))

        row = dict(
            fields,
            id=existing["id"],
            created_at=existing["created_at"],
            updated_at=_utcnow().isoformat(),
        )
        try:
            await self.db.update_entry_row(row)
        except aiosqlite.IntegrityError as exc:
            raise DuplicateDateError(from_date_key(fields["entry_date"])) from exc
        logger.debug("Updated entry %s", row["id"])
        return row_to_entry(row)

    async def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry; False if nothing was stored under *entry_id*."""
        removed = await self.db.delete_entry_row(entry_id)
        if removed:
            logger.debug("Deleted entry %s", entry_id)
        return removed

    # -----------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------

    async def get_entry(self, entry_id: str) -> Optional[JournalEntry]:
        row = await self.db.get_entry_row(entry_id)
        return row_to_entry(row) if row else None

    async def get_entry_by_date(self, entry_date: DateLike) -> Optional[JournalEntry]:
        row = await self.db.get_entry_row_by_date(to_date_key(entry_date))
        return row_to_entry(row) if row else None

    async def get_all_entries(self) -> List[JournalEntry]:
        """Every entry, newest date first."""
        return [row_to_entry(r) for r in await self.db.list_entry_rows()]

    async def get_entries_in_range(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[JournalEntry]:
        """Entries with ``start <= entry_date <= end``; a missing bound is open."""
        entries = await self.get_all_entries()
        return [
            e for e in entries
            if (start is None or e.entry_date >= start)
            and (end is None or e.entry_date <= end)
        ]

    async def has_entry_for_date(self, entry_date: DateLike) -> bool:
        return await self.db.get_entry_row_by_date(to_date_key(entry_date)) is not None

    async def has_entry_for_today(self, today: Optional[date] = None) -> bool:
        return await self.has_entry_for_date(today or date.today())

    async def total_count(self) -> int:
        return await self.db.count_entries()

    async def get_insights(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        today: Optional[date] = None,
    ) -> JournalInsights:
        """Insights over all entries, or over the inclusive ``start..end`` window."""
        entries = await self.get_entries_in_range(start, end)
        return build_insights(entries, start, end, today=today)
