"""SQLAlchemy ORM models for the rate lock service."""

from ratelock.models.currency import Currency
from ratelock.models.rate_lock import RateLock

__all__ = [
    "Currency",
    "RateLock",
]
