"""Tests for PIN hashing and the credential gate."""

import asyncio
import base64
import inspect

import pytest

from dailyjournal import crypto
from dailyjournal.auth import PIN_HASH_KEY, CredentialGate
from dailyjournal.crypto import PIN_KEY_LEN, PIN_SALT_LEN, hash_pin, split_pin_hash, verify_pin

FAST = 1_000


class TestPinHash:
    def test_format_is_salt_and_hash(self):
        stored = hash_pin("1234", iterations=FAST)
        salt_b64, hash_b64 = stored.split(":")
        assert len(base64.b64decode(salt_b64)) == PIN_SALT_LEN
        assert len(base64.b64decode(hash_b64)) == PIN_KEY_LEN

    def test_fresh_salt_every_time(self):
        assert hash_pin("1234", iterations=FAST) != hash_pin("1234", iterations=FAST)

    def test_verify(self):
        stored = hash_pin("1234", iterations=FAST)
        assert verify_pin("1234", stored, iterations=FAST)
        assert not verify_pin("4321", stored, iterations=FAST)
        assert not verify_pin("1234", stored)

    @pytest.mark.parametrize(
        "stored",
        [None, "", "   ", "no-separator", "a:b:c", "!!!:@@@", ":", "AAAA:", ":AAAA"],
    )
    def test_malformed_stored_value_fails(self, stored):
        assert not verify_pin("1234", stored, iterations=FAST)

    def test_split_pin_hash(self):
        assert split_pin_hash("AAAA:AAAA") == (b"\x00\x00\x00", b"\x00\x00\x00")
        assert split_pin_hash("AAAA") is None

    def test_comparison_is_constant_time(self):
        source = inspect.getsource(crypto.verify_pin)
        assert "constant_time.bytes_eq" in source
        assert "==" not in source.split("constant_time.bytes_eq")[1]


def _gate(secret_store):
    return CredentialGate(secret_store)


class TestCredentialGate:
    def test_defaults_unlocked_without_pin(self, secret_store):
        async def scenario():
            gate = _gate(secret_store)
            await gate.initialize()
            assert gate.is_unlocked
            assert not gate.is_pin_set
            gate.lock()
            assert gate.is_unlocked
            assert await gate.unlock("anything")

        asyncio.run(scenario())

    def test_set_unlock_clear_flow(self, secret_store):
        async def scenario():
            gate = _gate(secret_store)
            await gate.initialize()
            await gate.set_pin("1234")
            assert gate.is_pin_set and gate.is_unlocked

            gate.lock()
            assert not gate.is_unlocked
            assert not await gate.unlock("9999")
            assert not gate.is_unlocked
            assert await gate.unlock("1234")
            assert gate.is_unlocked

            assert not await gate.clear_pin("0000")
            assert gate.is_pin_set
            assert await gate.clear_pin("1234")
            assert not gate.is_pin_set
            assert await secret_store.get(PIN_HASH_KEY) is None
            gate.lock()
            assert gate.is_unlocked
            assert await gate.unlock("whatever")

        asyncio.run(scenario())

    def test_wrong_pin_does_not_lock_an_unlocked_gate(self, secret_store):
        async def scenario():
            gate = _gate(secret_store)
            await gate.set_pin("1234")
            assert not await gate.unlock("9999")
            assert gate.is_unlocked

        asyncio.run(scenario())

    def test_pin_persists_across_instances(self, secret_store):
        async def scenario():
            await _gate(secret_store).set_pin("1234")
            gate = _gate(secret_store)
            await gate.initialize()
            assert gate.is_pin_set
            assert not gate.is_unlocked
            assert await gate.unlock("1234")

        asyncio.run(scenario())

    def test_change_pin(self, secret_store):
        async def scenario():
            gate = _gate(secret_store)
            await gate.set_pin("1234")
            before = await secret_store.get(PIN_HASH_KEY)
            assert not await gate.change_pin("0000", "5678")
            assert await secret_store.get(PIN_HASH_KEY) == before

            assert await gate.change_pin("1234", "5678")
            gate.lock()
            assert not await gate.unlock("1234")
            assert await gate.unlock("5678")

        asyncio.run(scenario())

    def test_change_and_clear_fail_without_pin(self, secret_store):
        async def scenario():
            gate = _gate(secret_store)
            await gate.initialize()
            assert not await gate.change_pin("", "1234")
            assert not await gate.clear_pin("")
            assert not gate.is_pin_set

        asyncio.run(scenario())

    def test_empty_pin_rejected(self, secret_store):
        async def scenario():
            gate = _gate(secret_store)
            with pytest.raises(ValueError):
                await gate.set_pin("")
            assert await secret_store.get(PIN_HASH_KEY) is None

        asyncio.run(scenario())

    def test_malformed_stored_hash_fails_closed(self, secret_store):
        async def scenario():
            await secret_store.set(PIN_HASH_KEY, "not-a-valid-hash")
            gate = _gate(secret_store)
            await gate.initialize()
            assert gate.is_pin_set
            assert not gate.is_unlocked
            assert not await gate.unlock("1234")
            assert not gate.is_unlocked

        asyncio.run(scenario())

    def test_listeners_notified_on_changes(self, secret_store):
        async def scenario():
            gate = _gate(secret_store)
            seen = []
            unsubscribe = gate.subscribe(lambda g: seen.append((g.is_pin_set, g.is_unlocked)))

            await gate.initialize()
            await gate.set_pin("1234")
            gate.lock()
            assert not await gate.unlock("0000")
            await gate.unlock("1234")
            assert seen == [(False, True), (True, True), (True, False), (True, True)]

            unsubscribe()
            unsubscribe()
            gate.lock()
            assert len(seen) == 4

        asyncio.run(scenario())
