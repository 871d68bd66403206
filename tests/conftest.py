"""Shared fixtures for DailyJournal tests."""

from datetime import date

import pytest

from dailyjournal.db import Database
from dailyjournal.journal import EntryStore
from dailyjournal.models import JournalEntry
from dailyjournal.secret_store import SecretStore


@pytest.fixture
def store(tmp_path):
    """An entry store backed by a fresh database file."""
    return EntryStore(Database(tmp_path / "journal.sqlite3"))


@pytest.fixture
def secret_store(tmp_path):
    return SecretStore(tmp_path / "secrets.json")


@pytest.fixture
def make_entry():
    """Factory for valid candidate entries; keyword arguments override fields."""

    def _make(**overrides):
        fields = dict(
            title="A day",
            content="Wrote some words today",
            entry_date=date(2024, 1, 1),
            primary_mood="Happy",
            secondary_moods=["Excited"],
            tags=["Work"],
            category="Personal",
        )
        fields.update(overrides)
        return JournalEntry(**fields)

    return _make
