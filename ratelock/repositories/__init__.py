"""Persistence adapters for rate locks and currencies."""

from ratelock.repositories.currency_repository import CurrencyRepository
from ratelock.repositories.rate_lock_repository import RateLockRepository

__all__ = ["CurrencyRepository", "RateLockRepository"]
