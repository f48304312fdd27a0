"""Review model definitions."""

from sqlalchemy import Column, Float, Integer, String, Text
from bistro.database import Base


class Review(Base):
    """Represents a customer testimonial."""
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String)
    details = Column(Text)
    rating = Column(Float)
