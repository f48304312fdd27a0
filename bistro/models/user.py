"""User model definitions."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import JSON, Column, DateTime, Integer, String
from bistro.database import Base


class UserRole(str, Enum):
    """Closed set of roles a user can hold."""
    MEMBER = "member"
    ADMIN = "admin"


class User(Base):
    """Represents a registered diner or staff member."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String)
    photo_url = Column(String)
    role = Column(String, nullable=False, default=UserRole.MEMBER.value)
    profile = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
