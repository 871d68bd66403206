# -*- coding: utf-8 -*-
"""Pure statistics over a list of journal entries.

Every function here works on in-memory values only. An "entry" is any object
exposing ``entry_date``, ``content``, ``primary_mood``, ``secondary_moods``
and ``tags`` (``JournalEntry`` qualifies).
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .models import CountItem, JournalInsights, WordCountTrend

TREND_POINTS = 10


def distinct_dates(entries: Iterable[Any]) -> List[date]:
    """Distinct entry dates, ascending."""
    return sorted({e.entry_date for e in entries})


def count_words(content: Optional[str]) -> int:
    """Number of whitespace-delimited tokens in *content*."""
    if not content:
        return 0
    return len(content.split())


def missed_days(dates: Sequence[date]) -> int:
    """Days without an entry between the first and last date (inclusive span)."""
    if len(dates) < 2:
        return 0
    span = (dates[-1] - dates[0]).days + 1
    return max(0, span - len(dates))


def current_streak(dates: Iterable[date], today: date) -> int:
    """Consecutive days with an entry, counting back from *today*.

    A day without an entry today means no current streak, even if yesterday
    closed a long run.
    """
    present = set(dates)
    streak = 0
    cursor = today
    while cursor in present:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(dates: Sequence[date]) -> int:
    """Longest run of consecutive days in sorted distinct *dates*."""
    if not dates:
        return 0
    longest = current = 1
    for prev, cur in zip(dates, dates[1:]):
        if cur.toordinal() == prev.toordinal() + 1:
            current += 1
        else:
            longest = max(longest, current)
            current = 1
    return max(longest, current)


def rank_labels(labels: Iterable[Optional[str]]) -> List[CountItem]:
    """Group *labels* case-insensitively and rank by count, then label.

    The first spelling seen for a group is used as its label. Blank labels
    are ignored.
    """
    counts: Dict[str, CountItem] = {}
    for label in labels:
        if not label or not label.strip():
            continue
        key = label.casefold()
        item = counts.get(key)
        if item is None:
            counts[key] = CountItem(label=label, count=1)
        else:
            item.count += 1
    return sorted(counts.values(), key=lambda i: (-i.count, i.label.upper()))


def mood_counts(entries: Iterable[Any]) -> List[CountItem]:
    """Every secondary mood and the primary mood of each entry is one vote."""
    return rank_labels(
        mood
        for e in entries
        for mood in list(e.secondary_moods or []) + [e.primary_mood]
    )


def tag_counts(entries: Iterable[Any]) -> List[CountItem]:
    return rank_labels(tag for e in entries for tag in (e.tags or []))


def word_count_trends(entries: Iterable[Any], points: int = TREND_POINTS) -> List[WordCountTrend]:
    """Word counts of the last *points* entries in ascending date order."""
    if points <= 0:
        return []
    ordered = sorted(entries, key=lambda e: e.entry_date)
    return [
        WordCountTrend(date=e.entry_date, word_count=count_words(e.content))
        for e in ordered[-points:]
    ]


def average_words_per_day(
    entries: Sequence[Any],
    dates: Sequence[date],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> int:
    """Total words divided by the days in the effective window.

    Explicit *start*/*end* bounds win; otherwise the first/last observed
    dates bound the window. Rounded to the nearest integer (half to even).
    """
    total_words = sum(count_words(e.content) for e in entries)
    eff_start = start if start is not None else (dates[0] if dates else None)
    eff_end = end if end is not None else (dates[-1] if dates else None)
    if eff_start is not None and eff_end is not None:
        days = (eff_end - eff_start).days + 1
    else:
        days = len(dates)
    return round(total_words / days) if days > 0 else 0


def build_insights(
    entries: Sequence[Any],
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None,
) -> JournalInsights:
    """Compute the full insights bundle for *entries*.

    *start*/*end* only affect the words-per-day average; callers filter the
    entries themselves. *today* defaults to the local calendar date.
    """
    entries = list(entries)
    today = today or date.today()
    dates = distinct_dates(entries)
    return JournalInsights(
        total_entries=len(entries),
        has_entry_for_today=any(e.entry_date == today for e in entries),
        current_streak=current_streak(dates, today),
        longest_streak=longest_streak(dates),
        missed_days=missed_days(dates),
        avg_words_per_day=average_words_per_day(entries, dates, start, end),
        mood_counts=mood_counts(entries),
        tag_counts=tag_counts(entries),
        word_count_trends=word_count_trends(entries),
    )
