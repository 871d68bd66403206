# -*- coding: utf-8 -*-
"""PIN lock for the journal.

The gate keeps only a salted PBKDF2 hash of the PIN in the secret store.
Verification failures are reported as ``False`` and never say why.
"""
from __future__ import annotations

from typing import Callable, List, Optional
import logging

from .crypto import hash_pin, verify_pin
from .secret_store import SecretStore

logger = logging.getLogger(__name__)

PIN_HASH_KEY = "journal_pin_hash"

Listener = Callable[["CredentialGate"], None]


class CredentialGate:
    """Tracks whether a PIN is set and whether the journal is unlocked.

    Without a PIN the gate stays unlocked and :meth:`lock` does nothing.
    Listeners registered with :meth:`subscribe` are called with the gate
    after every state change.
    """

    def __init__(self, secret_store: SecretStore):
        self._secrets = secret_store
        self._stored_hash: Optional[str] = None
        self._listeners: List[Listener] = []
        self.is_unlocked = True

    @property
    def is_pin_set(self) -> bool:
        return bool(self._stored_hash and self._stored_hash.strip())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    async def initialize(self) -> None:
        """Load the stored hash; start locked only if a PIN exists."""
        self._stored_hash = await self._secrets.get(PIN_HASH_KEY)
        self.is_unlocked = not self.is_pin_set
        self._notify()

    async def set_pin(self, pin: str) -> None:
        if not pin:
            raise ValueError("PIN required")
        value = hash_pin(pin)
        await self._secrets.set(PIN_HASH_KEY, value)
        self._stored_hash = value
        self.is_unlocked = True
        logger.info("PIN set")
        self._notify()

    async def unlock(self, pin: str) -> bool:
        if self.is_pin_set and not verify_pin(pin, self._stored_hash):
            logger.info("Unlock attempt rejected")
            return False
        self.is_unlocked = True
        self._notify()
        return True

    async def change_pin(self, current_pin: str, new_pin: str) -> bool:
        if not verify_pin(current_pin, self._stored_hash):
            return False
        await self.set_pin(new_pin)
        return True

    async def clear_pin(self, pin: str) -> bool:
        if not verify_pin(pin, self._stored_hash):
            return False
        await self._secrets.remove(PIN_HASH_KEY)
        self._stored_hash = None
        self.is_unlocked = True
        logger.info("PIN cleared")
        self._notify()
        return True

    def lock(self) -> None:
        if not self.is_pin_set:
            return
        self.is_unlocked = False
        self._notify()
