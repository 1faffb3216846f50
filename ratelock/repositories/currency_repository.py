"""
Currency lookups backed by the ``currencies`` table.

Each lookup opens its own short-lived session from the factory, so
several lookups can run concurrently under ``asyncio.gather`` (a single
AsyncSession does not allow overlapping statements).
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ratelock.models.currency import Currency


class CurrencyRepository:
    """Read-only access to currency records."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_by_code(self, code: str) -> Currency | None:
        """Return the currency with exactly this code, or None."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Currency).where(Currency.code == code)
            )
            return result.scalar_one_or_none()
