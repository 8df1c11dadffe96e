"""User model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from agenda.database import Base


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, default="USER")  # USER/ADMIN
    created_at = Column(DateTime, default=datetime.utcnow)
