# -*- coding: utf-8 -*-
"""PIN hashing helpers for DailyJournal.

This module encapsulates *stateless* key-stretching helpers. It does **not**
read or write the secret store.
"""
from __future__ import annotations

from typing import Optional, Tuple
import base64
import binascii
import secrets

from cryptography.hazmat.primitives import constant_time, hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

# ---------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------

PIN_SALT_LEN = 16
PIN_KEY_LEN = 32
PIN_ITERATIONS = 100_000

HASH_SEPARATOR = ":"


# ---------------------------------------------------------------------
# KDF helpers
# ---------------------------------------------------------------------

def pbkdf2_kdf(pin: str, salt: bytes, length: int = PIN_KEY_LEN,
               iterations: int = PIN_ITERATIONS) -> bytes:
    """Derive a key from a PIN using PBKDF2-HMAC-SHA256."""
    kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=length, salt=salt, iterations=iterations)
    return kdf.derive(pin.encode("utf-8"))


def hash_pin(pin: str, iterations: int = PIN_ITERATIONS) -> str:
    """Return ``base64(salt):base64(hash)`` for *pin* with a fresh random salt."""
    salt = secrets.token_bytes(PIN_SALT_LEN)
    digest = pbkdf2_kdf(pin, salt, PIN_KEY_LEN, iterations)
    return HASH_SEPARATOR.join(
        base64.b64encode(part).decode("ascii") for part in (salt, digest)
    )


def split_pin_hash(stored: str) -> Optional[Tuple[bytes, bytes]]:
    """Decode a stored ``salt:hash`` pair; None if it is malformed."""
    parts = stored.split(HASH_SEPARATOR)
    if len(parts) != 2:
        return None
    try:
        salt = base64.b64decode(parts[0], validate=True)
        expected = base64.b64decode(parts[1], validate=True)
    except (binascii.Error, ValueError):
        return None
    if not salt or not expected:
        return None
    return salt, expected


def verify_pin(pin: str, stored: Optional[str], iterations: int = PIN_ITERATIONS) -> bool:
    """Check *pin* against a stored ``salt:hash`` value.

    The digest comparison runs in constant time. Malformed or missing stored
    values simply fail verification.
    """
    if not stored or not stored.strip():
        return False
    decoded = split_pin_hash(stored)
    if decoded is None:
        return False
    salt, expected = decoded
    try:
        actual = pbkdf2_kdf(pin, salt, len(expected), iterations)
    except ValueError:
        return False
    return constant_time.bytes_eq(actual, expected)
