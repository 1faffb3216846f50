"""
Rate lock model — a time-boxed commitment to an exchange rate.

A lock belongs to one user and one ``FROM/TO`` currency pair. It is
written once and never updated: ``locked_rate`` and ``expires_at`` are
fixed at creation, and the only way to change a quote is to let the
lock expire and create a new one.

Lifecycle:
    ACTIVE  (now < expires_at)
    EXPIRED (now >= expires_at, row still stored)
    PURGED  (row deleted by the cleanup sweep)
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Index, Numeric, String, event
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from ratelock.database import Base

# Must match the scale of the locked_rate column
RATE_SCALE = 8


class RateLock(Base):
    __tablename__ = "rate_locks"
    __table_args__ = (
        Index("ix_rate_locks_user_id_pair", "user_id", "pair"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    pair: Mapped[str] = mapped_column(String(32), nullable=False)

    locked_rate: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=RATE_SCALE), nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), index=True, nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def is_active_at(self, moment: datetime) -> bool:
        """Return True while *moment* is strictly before ``expires_at``."""
        return moment < self.expires_at

    def __repr__(self) -> str:
        return (
            f"<RateLock {self.pair} user={self.user_id} "
            f"rate={self.locked_rate} expires_at={self.expires_at}>"
        )


@event.listens_for(RateLock, "init")
def _set_rate_lock_defaults(target, args, kwargs):
    now = datetime.now(timezone.utc)
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "created_at" not in kwargs:
        target.created_at = now
    if "updated_at" not in kwargs:
        target.updated_at = kwargs.get("created_at", now)
