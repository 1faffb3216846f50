"""
Rate lock cleanup Celery task.

Purges expired rate locks on the schedule defined by
RATE_LOCK_CLEANUP_INTERVAL_SECONDS. Locks are kept for
RATE_LOCK_CLEANUP_GRACE_SECONDS after expiry before removal.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from ratelock.config import settings
from ratelock.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


async def _cleanup_expired_rate_locks_async() -> dict:
    """
    Async inner function that deletes expired rate locks.

    Uses session_scope() directly since Celery runs outside any
    request lifecycle.
    """
    from ratelock.database import session_scope
    from ratelock.services.rate_lock_service import get_rate_lock_service

    now = datetime.now(timezone.utc)
    cutoff = now - timedelta(seconds=settings.RATE_LOCK_CLEANUP_GRACE_SECONDS)

    async with session_scope() as session:
        svc = get_rate_lock_service(session)
        deleted = await svc.cleanup_expired_locks(cutoff)

    if deleted > 0:
        logger.info("Cleaned up %d expired rate lock(s)", deleted)
    else:
        logger.info("No expired rate locks to clean up at %s", now.isoformat())

    return {
        "deleted_count": deleted,
        "cutoff": cutoff.isoformat(),
    }


@celery_app.task(name="ratelock.tasks.cleanup_tasks.cleanup_expired_rate_locks")
def cleanup_expired_rate_locks():
    """
    Delete rate locks that expired before the cutoff.

    Celery tasks are synchronous, so we run the async function
    in an event loop.
    """
    logger.info("Starting expired rate lock cleanup")
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(_cleanup_expired_rate_locks_async())
    except Exception:
        logger.exception("Rate lock cleanup failed")
        raise
    finally:
        loop.close()
