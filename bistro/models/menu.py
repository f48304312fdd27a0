"""Menu model definitions."""

from sqlalchemy import Column, Float, Integer, String, Text
from bistro.database import Base


class MenuItem(Base):
    """Represents a dish offered by the restaurant."""
    __tablename__ = "menu"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    category = Column(String, index=True)
    recipe = Column(Text)
    price = Column(Float, nullable=False, default=0)
    image = Column(String)
