"""Tests for storage/gate.py.

The gate is exercised against FakeStore, which records every physical
read and write so retry behavior can be asserted exactly.
"""

import logging

import pytest

from octomatiz.error_pages import status_for_error
from octomatiz.storage import MAX_WRITE_ATTEMPTS, StorageGate
from octomatiz.types import ErrorCode, KVResult


class TestAvailability:
    """Tests for gates without a store."""

    def test_available_with_store(self, fake_store):
        """A gate with a store is available."""
        assert StorageGate(fake_store()).available() is True

    def test_unavailable_without_store(self):
        """A gate without a store is unavailable."""
        assert StorageGate(None).available() is False

    @pytest.mark.asyncio
    async def test_put_unavailable(self):
        """put on an unavailable gate returns KV_UNAVAILABLE."""
        result = await StorageGate(None).put("landing:x", "{}")

        assert result.success is False
        assert result.error_code == ErrorCode.KV_UNAVAILABLE
        assert result.error

    @pytest.mark.asyncio
    async def test_get_unavailable(self):
        """get on an unavailable gate returns no data and KV_UNAVAILABLE."""
        result = await StorageGate(None).get("landing:x")

        assert result.data is None
        assert result.error is not None
        assert result.error.error_code == ErrorCode.KV_UNAVAILABLE


class TestGet:
    """Tests for StorageGate.get."""

    @pytest.mark.asyncio
    async def test_absent_key_is_not_an_error(self, fake_store):
        """A missing key yields None without an error."""
        result = await StorageGate(fake_store()).get("landing:missing")

        assert result.data is None
        assert result.error is None
        assert result.ok

    @pytest.mark.asyncio
    async def test_returns_raw_value(self, fake_store):
        """Values are returned as stored by default."""
        store = fake_store({"short:abc123": "toko-budi"})
        result = await StorageGate(store).get("short:abc123")

        assert result.data == "toko-budi"
        assert store.get_calls == ["short:abc123"]

    @pytest.mark.asyncio
    async def test_decodes_json(self, fake_store):
        """as_json decodes the stored document."""
        store = fake_store({"landing:toko-budi": '{"html": "<p>hi</p>"}'})
        result = await StorageGate(store).get("landing:toko-budi", as_json=True)

        assert result.data == {"html": "<p>hi</p>"}

    @pytest.mark.asyncio
    async def test_undecodable_json_is_read_error(self, fake_store):
        """A value that is not JSON is reported as a read error."""
        store = fake_store({"landing:broken": "not json"})
        result = await StorageGate(store).get("landing:broken", as_json=True)

        assert result.data is None
        assert result.error.error_code == ErrorCode.KV_READ_ERROR

    @pytest.mark.asyncio
    async def test_fault_is_read_error(self, fake_store, caplog):
        """A faulting read returns KV_READ_ERROR and logs the key."""
        store = fake_store(get_error=ConnectionError("store down"))

        with caplog.at_level(logging.ERROR, logger="octomatiz.storage.gate"):
            result = await StorageGate(store).get("landing:toko-budi")

        assert result.data is None
        assert result.error.success is False
        assert result.error.error_code == ErrorCode.KV_READ_ERROR
        assert status_for_error(result.error.error_code) == 503
        assert "landing:toko-budi" in caplog.text

    @pytest.mark.asyncio
    async def test_read_is_not_retried(self, fake_store):
        """Reads are attempted once."""
        store = fake_store(get_error=ConnectionError("store down"))
        await StorageGate(store).get("landing:x")

        assert len(store.get_calls) == 1


class TestPut:
    """Tests for StorageGate.put retry behavior."""

    @pytest.mark.asyncio
    async def test_immediate_success_single_attempt(self, fake_store):
        """A successful write is attempted exactly once."""
        store = fake_store()
        result = await StorageGate(store).put("landing:a", "{}")

        assert result == KVResult(success=True)
        assert len(store.put_calls) == 1
        assert store.data["landing:a"] == "{}"

    @pytest.mark.asyncio
    async def test_fail_once_then_succeed(self, fake_store, caplog):
        """A write failing once succeeds on the retry."""
        store = fake_store(put_failures=1)

        with caplog.at_level(logging.WARNING, logger="octomatiz.storage.gate"):
            result = await StorageGate(store).put("landing:a", "{}")

        assert result.success is True
        assert result.error_code is None
        assert len(store.put_calls) == 2
        assert store.data["landing:a"] == "{}"
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "landing:a" in warnings[0].getMessage()

    @pytest.mark.asyncio
    async def test_fail_twice(self, fake_store, caplog):
        """Two failed attempts return KV_WRITE_ERROR."""
        store = fake_store(put_failures=2)

        with caplog.at_level(logging.WARNING, logger="octomatiz.storage.gate"):
            result = await StorageGate(store).put("landing:a", "{}")

        assert result.success is False
        assert result.error_code == ErrorCode.KV_WRITE_ERROR
        assert len(store.put_calls) == 2
        assert "landing:a" not in store.data
        levels = [r.levelno for r in caplog.records]
        assert levels == [logging.WARNING, logging.ERROR]

    @pytest.mark.asyncio
    async def test_never_more_than_two_attempts(self, fake_store):
        """A store that always fails sees at most two writes."""
        store = fake_store(put_failures=10)
        await StorageGate(store).put("landing:a", "{}")

        assert len(store.put_calls) == MAX_WRITE_ATTEMPTS == 2

    @pytest.mark.asyncio
    async def test_retry_uses_identical_arguments(self, fake_store):
        """The retry repeats the key, value and expiry of the first attempt."""
        store = fake_store(put_failures=1)
        await StorageGate(store).put("short:abc", "toko-budi", expiration_ttl=600)

        assert store.put_calls[0] == store.put_calls[1] == (
            "short:abc",
            "toko-budi",
            600,
        )


class TestKVResult:
    """Tests for the KVResult envelope."""

    def test_success_envelope(self):
        """Successful results only carry success."""
        assert KVResult(success=True).to_dict() == {"success": True}

    def test_failure_envelope(self):
        """Failures carry the message and camelCase error code."""
        result = KVResult(
            success=False, error="boom", error_code=ErrorCode.KV_WRITE_ERROR
        )
        assert result.to_dict() == {
            "success": False,
            "error": "boom",
            "errorCode": "KV_WRITE_ERROR",
        }
