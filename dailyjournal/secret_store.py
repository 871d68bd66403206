# -*- coding: utf-8 -*-
"""Small key -> string store for secrets and preferences.

Values live in a JSON object on disk, readable by the owner only. No
operation raises: read failures look like a missing key and write failures
are logged and dropped.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Union
import asyncio
import json
import logging
import os

logger = logging.getLogger(__name__)


class SecretStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("secret store is not a JSON object")
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, self.path)

    async def get(self, key: str) -> Optional[str]:
        """Return the value for *key*, or None if absent or unreadable."""
        try:
            return (await asyncio.to_thread(self._read)).get(key)
        except (OSError, ValueError) as exc:
            logger.warning("Secret store read failed (%s); treating %r as absent", exc, key)
            return None

    async def set(self, key: str, value: str) -> None:
        try:
            data = await asyncio.to_thread(self._read)
        except (OSError, ValueError) as exc:
            logger.warning("Secret store unreadable (%s); starting fresh", exc)
            data = {}
        data[key] = value
        try:
            await asyncio.to_thread(self._write, data)
        except OSError as exc:
            logger.warning("Secret store write failed for %r: %s", key, exc)

    async def remove(self, key: str) -> None:
        try:
            data = await asyncio.to_thread(self._read)
            if data.pop(key, None) is not None:
                await asyncio.to_thread(self._write, data)
        except (OSError, ValueError) as exc:
            logger.warning("Secret store remove failed for %r: %s", key, exc)
