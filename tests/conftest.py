"""
Shared test fixtures for the rate lock service.

Provides a controllable clock, in-memory stand-ins for the lock store
and currency lookup, and an AsyncMock database session.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from ratelock.models.currency import Currency
from ratelock.models.rate_lock import RateLock
from ratelock.services.rate_lock_service import RateLockService


T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
LOCK_DURATION = timedelta(minutes=5)


# --- Clock ---


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FrozenClock()


# --- In-memory collaborators ---


class InMemoryRateLockStore:
    """List-backed lock store with the same query semantics as RateLockRepository."""

    def __init__(self):
        self.rows: list[RateLock] = []

    async def find_active(self, user_id, pair, now):
        matches = [
            lock for lock in self.rows
            if lock.user_id == user_id and lock.pair == pair and lock.expires_at > now
        ]
        if not matches:
            return None
        return max(matches, key=lambda lock: lock.expires_at)

    async def get(self, lock_id):
        for lock in self.rows:
            if str(lock.id) == str(lock_id):
                return lock
        return None

    async def add(self, lock):
        self.rows.append(lock)
        return lock

    async def delete_expired_before(self, cutoff):
        keep = [lock for lock in self.rows if not lock.expires_at < cutoff]
        deleted = len(self.rows) - len(keep)
        self.rows = keep
        return deleted


class InMemoryCurrencyLookup:
    """Dict-backed currency lookup that records every code requested."""

    def __init__(self, currencies: list[Currency]):
        self.by_code = {c.code: c for c in currencies}
        self.requested: list[str] = []

    async def find_by_code(self, code):
        self.requested.append(code)
        return self.by_code.get(code)


def _make_currency(code: str, rate, name: str | None = None) -> Currency:
    return Currency(
        code=code,
        name=name or code,
        rate=Decimal(str(rate)) if rate is not None else None,
    )


@pytest.fixture
def make_currency():
    """Factory fixture for creating Currency instances."""
    return _make_currency


@pytest.fixture
def lock_store():
    return InMemoryRateLockStore()


@pytest.fixture
def currency_lookup():
    return InMemoryCurrencyLookup([
        _make_currency("USD", 1, "US Dollar"),
        _make_currency("NGN", 1500, "Nigerian Naira"),
        _make_currency("EUR", "0.92", "Euro"),
        _make_currency("XLM", None, "Stellar Lumens"),
    ])


@pytest.fixture
def service(lock_store, currency_lookup, clock):
    """RateLockService wired to in-memory collaborators and a frozen clock."""
    return RateLockService(
        lock_store, currency_lookup, lock_duration=LOCK_DURATION, clock=clock,
    )


@pytest.fixture
def make_lock():
    """Factory fixture for RateLock instances with test defaults."""

    def _make_lock(**overrides) -> RateLock:
        defaults = {
            "user_id": "user-1",
            "pair": "USD/NGN",
            "locked_rate": Decimal("1500"),
            "expires_at": T0 + LOCK_DURATION,
        }
        defaults.update(overrides)
        return RateLock(**defaults)

    return _make_lock


# --- Mock Database Session ---


@pytest.fixture
def mock_db():
    """AsyncMock database session."""
    db = AsyncMock()

    # Mock the result object returned by db.execute()
    mock_result = MagicMock()
    mock_result.scalar_one_or_none = MagicMock(return_value=None)
    mock_result.rowcount = 0
    db.execute = AsyncMock(return_value=mock_result)
    db.flush = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()

    return db
