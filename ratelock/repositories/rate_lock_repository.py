"""
Rate lock persistence on top of an AsyncSession.

The repository flushes but never commits: the caller owns the
transaction boundary (``session_scope()`` or the request session).
"""

import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ratelock.models.rate_lock import RateLock


class RateLockRepository:
    """Create, read, and purge RateLock rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_active(
        self, user_id: str, pair: str, now: datetime,
    ) -> RateLock | None:
        """
        Return the latest-expiring lock for ``(user_id, pair)`` that is
        still valid at *now*, or None.
        """
        result = await self.session.execute(
            select(RateLock)
            .where(
                RateLock.user_id == user_id,
                RateLock.pair == pair,
                RateLock.expires_at > now,
            )
            .order_by(RateLock.expires_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get(self, lock_id: str | uuid.UUID) -> RateLock | None:
        """Look up a lock by id regardless of expiry."""
        if not isinstance(lock_id, uuid.UUID):
            try:
                lock_id = uuid.UUID(str(lock_id))
            except ValueError:
                return None
        result = await self.session.execute(
            select(RateLock).where(RateLock.id == lock_id)
        )
        return result.scalar_one_or_none()

    async def add(self, lock: RateLock) -> RateLock:
        self.session.add(lock)
        await self.session.flush()
        return lock

    async def delete_expired_before(self, cutoff: datetime) -> int:
        """Delete every lock with ``expires_at < cutoff``; return the row count."""
        result = await self.session.execute(
            delete(RateLock).where(RateLock.expires_at < cutoff)
        )
        return result.rowcount or 0
