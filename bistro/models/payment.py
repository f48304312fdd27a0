"""Payment model definitions."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import JSON, Column, DateTime, Float, Integer, String
from bistro.database import Base


class CartCleanupStatus(str, Enum):
    """Outcome of removing a payment's cart items after it was recorded."""
    PENDING = "pending"
    CLEARED = "cleared"
    FAILED = "failed"


class Payment(Base):
    """Represents a completed checkout.

    The business fields are written once; only the cart cleanup bookkeeping
    changes afterwards.
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, index=True, nullable=False)
    price = Column(Float, nullable=False)
    transaction_id = Column(String, unique=True, index=True, nullable=False)
    cart_ids = Column(JSON, nullable=False, default=list)
    menu_item_ids = Column(JSON, nullable=False, default=list)
    status = Column(String, nullable=False, default="pending")
    date = Column(DateTime)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    cart_cleanup_status = Column(String, nullable=False, default=CartCleanupStatus.PENDING.value)
    cart_cleanup_attempts = Column(Integer, nullable=False, default=0)
