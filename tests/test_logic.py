"""Tests for configuration loading and service wiring."""

import asyncio
import json
from datetime import date

from dailyjournal import logic
from dailyjournal.models import JournalEntry


def test_load_config_writes_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.delenv(logic.DB_ENV_VAR, raising=False)

    cfg = logic.load_config()
    path = tmp_path / "dailyjournal" / "config.json"
    assert path.exists()
    assert cfg["db_path"].endswith("journal.sqlite3")
    assert cfg["log_level"] == "INFO"


def test_load_config_merges_file_and_env(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    (tmp_path / "dailyjournal").mkdir()
    (tmp_path / "dailyjournal" / "config.json").write_text(
        json.dumps({"log_level": "DEBUG"}), encoding="utf-8"
    )
    monkeypatch.setenv(logic.DB_ENV_VAR, str(tmp_path / "other.sqlite3"))

    cfg = logic.load_config()
    assert cfg["log_level"] == "DEBUG"
    assert cfg["db_path"] == str(tmp_path / "other.sqlite3")
    assert "secrets_path" in cfg


def test_services_share_one_secret_store(tmp_path):
    cfg = {
        "db_path": str(tmp_path / "data" / "journal.sqlite3"),
        "secrets_path": str(tmp_path / "secrets.json"),
        "log_level": "INFO",
    }

    async def scenario():
        services = logic.build_services(cfg)
        assert services.gate._secrets is services.secrets
        await services.initialize()
        try:
            assert services.gate.is_unlocked
            created = await services.entries.create_entry(JournalEntry(
                title="Hello",
                content="first entry",
                entry_date=date(2024, 5, 1),
                primary_mood="Neutral",
            ))
            assert await services.entries.total_count() == 1
            assert (await services.entries.get_entry(created.id)).title == "Hello"
        finally:
            await services.close()

    asyncio.run(scenario())
    assert (tmp_path / "data" / "journal.sqlite3").exists()
