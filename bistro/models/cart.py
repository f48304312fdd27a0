"""Cart model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String
from bistro.database import Base


class CartItem(Base):
    """Represents one menu item sitting in a user's cart."""
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, index=True, nullable=False)
    menu_item_id = Column(Integer)
    name = Column(String)
    image = Column(String)
    price = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
