"""
Rate Lock Manager — lock creation, cross-rate pricing, validity checks, cleanup.

A rate lock freezes the current cross rate for a user and a ``FROM/TO``
pair for a fixed duration. At most one lock per (user, pair) may be
active at a time. Pair rates are derived from the currency table, where
every currency stores its rate against a common base unit:

    rate(FROM/TO) = TO.rate / FROM.rate
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Protocol

from ratelock.config import settings
from ratelock.models.currency import Currency
from ratelock.models.rate_lock import RATE_SCALE, RateLock

logger = logging.getLogger(__name__)

PAIR_SEPARATOR = "/"
RATE_QUANTUM = Decimal(1).scaleb(-RATE_SCALE)  # 0.00000001


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------


class CurrencyLookup(Protocol):
    async def find_by_code(self, code: str) -> Currency | None:
        ...


class RateLockStore(Protocol):
    async def find_active(
        self, user_id: str, pair: str, now: datetime,
    ) -> RateLock | None:
        """Latest-expiring lock with expires_at > now, or None."""
        ...

    async def get(self, lock_id) -> RateLock | None:
        ...

    async def add(self, lock: RateLock) -> RateLock:
        ...

    async def delete_expired_before(self, cutoff: datetime) -> int:
        ...


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class RateLockError(Exception):
    """Base class for rate lock failures."""
    pass


class RateLockConflictError(RateLockError):
    """Raised when the user already holds an active lock for the pair."""

    def __init__(self, user_id: str, pair: str):
        self.user_id = user_id
        self.pair = pair
        super().__init__(
            "Active rate lock already exists for this user and currency pair."
        )


class RateLockValidationError(RateLockError, ValueError):
    """Raised for malformed input (empty user id, pair not in FROM/TO form)."""
    pass


class CurrencyNotFoundError(RateLockError):
    """Raised when a currency code in the pair has no record."""

    def __init__(self, pair: str, missing: list[str]):
        self.pair = pair
        self.missing = missing
        super().__init__(
            f"Could not find currencies for pair {pair}: {', '.join(missing)}"
        )


class MissingRateError(RateLockError):
    """Raised when a matched currency has no stored rate (upstream data problem)."""

    def __init__(self, pair: str, codes: list[str]):
        self.pair = pair
        self.codes = codes
        super().__init__(f"Missing rate data for {pair}: {', '.join(codes)}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_pair(pair: str) -> tuple[str, str]:
    """
    Split a ``FROM/TO`` pair into its two codes.

    The codes are returned exactly as given; no case folding or trimming
    is applied, so ``"usd/ngn"`` looks up the codes ``usd`` and ``ngn``.
    """
    if not isinstance(pair, str):
        raise RateLockValidationError(f"Invalid pair: expected 'FROM/TO', got {pair!r}")

    parts = pair.split(PAIR_SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise RateLockValidationError(
            f"Invalid pair format: expected 'FROM/TO', got '{pair}'"
        )
    return parts[0], parts[1]


# ---------------------------------------------------------------------------
# RateLockService
# ---------------------------------------------------------------------------


class RateLockService:
    """Creates, reads, and purges rate locks."""

    def __init__(
        self,
        locks: RateLockStore,
        currencies: CurrencyLookup,
        lock_duration: timedelta | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.locks = locks
        self.currencies = currencies
        if lock_duration is None:
            lock_duration = timedelta(seconds=settings.RATE_LOCK_DURATION_SECONDS)
        self.lock_duration = lock_duration
        self.clock = clock

    # --- Lock creation ---

    async def lock_rate(self, user_id: str, pair: str) -> RateLock:
        """
        Lock the current rate for ``(user_id, pair)``.

        Raises RateLockConflictError if an unexpired lock already exists.
        The conflict check and the insert are separate statements with no
        database constraint behind them, so two concurrent callers for the
        same key can both succeed; ``get_valid_rate_lock`` then returns the
        one that expires last.
        """
        if not user_id:
            raise RateLockValidationError("user_id is required")
        parse_pair(pair)

        now = self.clock()
        existing = await self.locks.find_active(user_id, pair, now)
        if existing is not None:
            logger.warning(
                "Rejected rate lock for user %s on %s: lock %s active until %s",
                user_id, pair, existing.id, existing.expires_at.isoformat(),
            )
            raise RateLockConflictError(user_id, pair)

        rate = await self.get_rate_for_pair(pair)

        lock = RateLock(
            user_id=user_id,
            pair=pair,
            locked_rate=rate.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP),
            expires_at=now + self.lock_duration,
            created_at=now,
            updated_at=now,
        )
        lock = await self.locks.add(lock)

        logger.info(
            "Locked %s at %s for user %s until %s",
            pair, lock.locked_rate, user_id, lock.expires_at.isoformat(),
        )
        return lock

    # --- Pricing ---

    async def get_rate_for_pair(self, pair: str) -> Decimal:
        """Return how many units of TO one unit of FROM buys."""
        from_code, to_code = parse_pair(pair)

        from_currency, to_currency = await asyncio.gather(
            self.currencies.find_by_code(from_code),
            self.currencies.find_by_code(to_code),
        )

        missing = [
            code for code, currency in ((from_code, from_currency), (to_code, to_currency))
            if currency is None
        ]
        if missing:
            logger.warning("Unknown currency in pair %s: %s", pair, missing)
            raise CurrencyNotFoundError(pair, missing)

        # A zero rate is treated as missing; it cannot price anything
        unrated = [c.code for c in (from_currency, to_currency) if not c.rate]
        if unrated:
            logger.warning("Currency without rate in pair %s: %s", pair, unrated)
            raise MissingRateError(pair, unrated)

        return Decimal(to_currency.rate) / Decimal(from_currency.rate)

    # --- Reads ---

    async def get_valid_rate_lock(self, user_id: str, pair: str) -> RateLock | None:
        """Return the unexpired lock for ``(user_id, pair)`` that expires last, or None."""
        return await self.locks.find_active(user_id, pair, self.clock())

    async def find_by_id(self, lock_id) -> RateLock | None:
        """Return the lock with this id, expired or not."""
        return await self.locks.get(lock_id)

    async def validate_rate_lock(
        self, user_id: str, pair: str, locked_rate: Decimal,
    ) -> bool:
        """
        True if a valid lock exists for the key and its rate equals *locked_rate*.

        *locked_rate* is rounded to the stored scale first, so an unrounded
        quote from ``get_rate_for_pair`` matches the lock it produced.
        """
        lock = await self.get_valid_rate_lock(user_id, pair)
        if lock is None:
            return False
        quoted = Decimal(str(locked_rate)).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)
        return Decimal(lock.locked_rate) == quoted

    async def is_expired(self, lock_id) -> bool:
        """Unknown locks count as expired; a lock is expired once now >= expires_at."""
        lock = await self.find_by_id(lock_id)
        if lock is None:
            return True
        return not lock.is_active_at(self.clock())

    # --- Cleanup ---

    async def cleanup_expired_locks(self, before: datetime) -> int:
        """Delete locks whose ``expires_at`` is strictly before *before*."""
        deleted = await self.locks.delete_expired_before(before)
        logger.info(
            "Deleted %d rate lock(s) expired before %s", deleted, before.isoformat(),
        )
        return deleted

    async def remove_expired_locks(self) -> int:
        """Delete every lock that has expired as of now."""
        return await self.cleanup_expired_locks(self.clock())


def get_rate_lock_service(session, **kwargs) -> RateLockService:
    """
    Wire a RateLockService to the database.

    Lock reads and writes share *session*; currency lookups open their own
    sessions so they can run concurrently.
    """
    from ratelock.database import async_session
    from ratelock.repositories import CurrencyRepository, RateLockRepository

    return RateLockService(
        RateLockRepository(session),
        CurrencyRepository(async_session),
        **kwargs,
    )
