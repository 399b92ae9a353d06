"""Shared fixtures: an in-memory fake key-value store and a SQLite database."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from octomatiz.db import create_all_tables


class FakeStore:
    """Dict-backed key-value store that can be told to fail.

    Attributes:
        data: Stored values.
        get_calls: Keys passed to ``get``, in order.
        put_calls: ``(key, value, expiration_ttl)`` passed to ``put``, in order.
    """

    def __init__(
        self,
        data=None,
        *,
        get_error=None,
        put_failures=0,
        put_fail_prefix=None,
    ):
        self.data = dict(data or {})
        self.get_error = get_error
        self.put_failures = put_failures
        self.put_fail_prefix = put_fail_prefix
        self.get_calls = []
        self.put_calls = []

    async def get(self, key):
        self.get_calls.append(key)
        if self.get_error is not None:
            raise self.get_error
        return self.data.get(key)

    async def put(self, key, value, expiration_ttl=None):
        self.put_calls.append((key, value, expiration_ttl))
        if self.put_fail_prefix is not None and key.startswith(self.put_fail_prefix):
            raise RuntimeError(f"write rejected for {key}")
        if self.put_failures:
            self.put_failures -= 1
            raise RuntimeError("simulated write failure")
        self.data[key] = value


@pytest.fixture
def fake_store():
    """Factory for FakeStore instances."""
    return FakeStore


@pytest.fixture
def engine(tmp_path):
    """Create a SQLite engine in tmp_path with all tables."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'octomatiz.db'}",
        connect_args={"check_same_thread": False},
        echo=False,
    )
    create_all_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Create a session factory for testing."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
