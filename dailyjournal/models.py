# -*- coding: utf-8 -*-
"""Domain value objects, mood catalog and error types for DailyJournal.

Nothing in here touches the database or the secret store.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

# ---------------------------------------------------------------------
# Mood catalog
# ---------------------------------------------------------------------

PRIMARY_MOODS = ("Happy", "Neutral", "Sad")

SECONDARY_MOODS = {
    "Happy": ("Excited", "Relaxed", "Grateful", "Confident"),
    "Neutral": ("Calm", "Thoughtful", "Curious", "Nostalgic", "Bored"),
    "Sad": ("Angry", "Stressed", "Lonely", "Anxious"),
}

TITLE_MAX_LEN = 200
MAX_SECONDARY_MOODS = 2


def is_primary_mood(mood: str) -> bool:
    """Return True if *mood* is one of the primary moods (case-insensitive)."""
    return mood.strip().casefold() in {m.casefold() for m in PRIMARY_MOODS}


def secondary_moods_for(primary: Optional[str]) -> List[str]:
    """Secondary moods offered for *primary*; empty for unknown moods."""
    if not primary:
        return []
    key = primary.strip().casefold()
    for name, moods in SECONDARY_MOODS.items():
        if name.casefold() == key:
            return list(moods)
    return []


def all_moods() -> List[str]:
    out: List[str] = []
    seen = set()
    for mood in list(PRIMARY_MOODS) + [m for ms in SECONDARY_MOODS.values() for m in ms]:
        if mood.casefold() not in seen:
            seen.add(mood.casefold())
            out.append(mood)
    return out


# ---------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------

class JournalError(Exception):
    """Base class for entry store failures shown to the user."""


class DuplicateDateError(JournalError):
    """Another entry already exists for the requested calendar date."""

    def __init__(self, entry_date: date):
        super().__init__(
            f"A journal entry already exists for {entry_date.isoformat()}. "
            "Only one entry per day is allowed."
        )
        self.entry_date = entry_date


class EntryNotFoundError(JournalError):
    """No entry with the given identity exists."""

    def __init__(self, entry_id: str):
        super().__init__(f"Journal entry with ID {entry_id} not found.")
        self.entry_id = entry_id


class EntryValidationError(JournalError, ValueError):
    """An entry field failed validation."""


# ---------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------

@dataclass
class JournalEntry:
    """One journal entry; ``entry_date`` is the natural key.

    ``id``, ``created_at`` and ``updated_at`` are assigned by the entry
    store. Values supplied by callers for the timestamps are ignored.
    """

    title: str
    content: str
    entry_date: date
    primary_mood: str
    secondary_moods: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    category: str = ""
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------

@dataclass
class CountItem:
    label: str
    count: int


@dataclass
class WordCountTrend:
    date: date
    word_count: int


@dataclass
class JournalInsights:
    """Derived statistics; recomputed on request and never stored."""

    total_entries: int = 0
    has_entry_for_today: bool = False
    current_streak: int = 0
    longest_streak: int = 0
    missed_days: int = 0
    avg_words_per_day: int = 0
    mood_counts: List[CountItem] = field(default_factory=list)
    tag_counts: List[CountItem] = field(default_factory=list)
    word_count_trends: List[WordCountTrend] = field(default_factory=list)
