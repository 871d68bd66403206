# -*- coding: utf-8 -*-
"""DailyJournal package.

Modules:
    models:       Entry/insight value objects, mood catalog, errors.
    crypto:       PIN key-stretching and verification.
    db:           SQLite schema + async data access.
    journal:      Entry store (one entry per day).
    insights:     Streaks, counts and trends over entries.
    secret_store: Small on-disk key/value store for secrets.
    auth:         PIN lock gate.
    logic:        Config, logging and service wiring.
"""

__all__ = ["auth", "crypto", "db", "insights", "journal", "logic", "models", "secret_store"]
