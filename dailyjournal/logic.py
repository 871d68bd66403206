# -*- coding: utf-8 -*-
"""Application wiring that composes config, storage and the PIN gate.

This module builds the service objects the UI talks to. All side effects
(DB + config I/O) are explicit and local.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging
import os

from .auth import CredentialGate
from .db import Database
from .journal import EntryStore
from .secret_store import SecretStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Config management (JSON on disk)
# ---------------------------------------------------------------------

APP_NAME = "dailyjournal"
DB_ENV_VAR = "DAILYJOURNAL_DB"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _config_dir() -> Path:
    """Return the config directory path for this platform."""
    if os.name == "nt":
        base = os.environ.get("APPDATA", os.path.expanduser("~\\AppData\\Roaming"))
        return Path(base) / APP_NAME
    base = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(base) / APP_NAME


def _config_path() -> Path:
    return _config_dir() / "config.json"


def default_config() -> Dict[str, Any]:
    return {
        "db_path": str(_config_dir() / "journal.sqlite3"),
        "secrets_path": str(_config_dir() / "secrets.json"),
        "log_level": "INFO",
    }


def load_config() -> Dict[str, Any]:
    """Load the merged configuration (defaults + file + environment)."""
    path = _config_path()
    merged = default_config()
    if not path.exists():
        save_config(merged)
    else:
        with path.open("r", encoding="utf-8") as f:
            merged.update(json.load(f))
    if os.environ.get(DB_ENV_VAR):
        merged["db_path"] = os.environ[DB_ENV_VAR]
    return merged


def save_config(cfg: Dict[str, Any]) -> None:
    """Persist *cfg* to the JSON config file."""
    _config_dir().mkdir(parents=True, exist_ok=True)
    with _config_path().open("w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


# ---------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------

@dataclass
class JournalServices:
    """The service objects shared by one running app."""

    secrets: SecretStore
    gate: CredentialGate
    entries: EntryStore

    async def initialize(self) -> None:
        """One-time startup: open the database and load the PIN state."""
        await self.entries.initialize()
        await self.gate.initialize()

    async def close(self) -> None:
        await self.entries.close()


def build_services(cfg: Optional[Dict[str, Any]] = None) -> JournalServices:
    """Construct (but do not initialize) the services described by *cfg*."""
    cfg = cfg if cfg is not None else load_config()
    secrets = SecretStore(cfg["secrets_path"])
    return JournalServices(
        secrets=secrets,
        gate=CredentialGate(secrets),
        entries=EntryStore(Database(cfg["db_path"])),
    )
