"""
Manual cleanup trigger — runs a single expired rate lock sweep.

Usage:
    python scripts/run_cleanup.py

Useful for purging locks without waiting for the Celery beat schedule.
"""

import asyncio
import json

from ratelock.tasks.cleanup_tasks import _cleanup_expired_rate_locks_async


async def main():
    """Run one cleanup sweep and print the report."""
    print("Starting manual rate lock cleanup...")
    result = await _cleanup_expired_rate_locks_async()

    print(json.dumps(result, indent=2))
    print(f"\nDeleted: {result['deleted_count']}")


if __name__ == "__main__":
    asyncio.run(main())
