"""
Currency seeder — populates the currencies table for development.

Usage:
    python scripts/seed_currencies.py

Rates are units per 1 USD, so USD is the base unit (rate 1).
Idempotent: existing codes are updated in place, missing ones inserted.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select

from ratelock.database import session_scope
from ratelock.models.currency import Currency

SAMPLE_CURRENCIES: list[dict] = [
    {"code": "USD", "name": "US Dollar", "rate": Decimal("1")},
    {"code": "NGN", "name": "Nigerian Naira", "rate": Decimal("1500")},
    {"code": "EUR", "name": "Euro", "rate": Decimal("0.92")},
    {"code": "GBP", "name": "British Pound", "rate": Decimal("0.79")},
    {"code": "GHS", "name": "Ghanaian Cedi", "rate": Decimal("15.40")},
    {"code": "KES", "name": "Kenyan Shilling", "rate": Decimal("129.50")},
    # Registered but not yet priced by the rate feed
    {"code": "XLM", "name": "Stellar Lumens", "rate": None},
]


async def seed_currencies() -> tuple[int, int]:
    """Insert or update SAMPLE_CURRENCIES. Returns (inserted, updated)."""
    inserted = updated = 0
    now = datetime.now(timezone.utc)

    async with session_scope() as session:
        for data in SAMPLE_CURRENCIES:
            result = await session.execute(
                select(Currency).where(Currency.code == data["code"])
            )
            currency = result.scalar_one_or_none()
            last_updated = now if data["rate"] is not None else None

            if currency is None:
                session.add(Currency(**data, last_updated=last_updated))
                inserted += 1
            else:
                currency.name = data["name"]
                currency.rate = data["rate"]
                currency.last_updated = last_updated
                updated += 1

    return inserted, updated


async def main():
    print("Seeding currencies...")
    inserted, updated = await seed_currencies()
    print(f"Inserted: {inserted}, updated: {updated}")


if __name__ == "__main__":
    asyncio.run(main())
