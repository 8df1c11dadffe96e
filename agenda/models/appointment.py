"""Appointment model definitions."""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from agenda.database import Base

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Appointment(Base):
    """Represents a timed appointment owned by a single user."""
    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_user_start", "user_id", "start_time"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(MAX_TITLE_LENGTH), nullable=False)
    description = Column(String(MAX_DESCRIPTION_LENGTH), nullable=True)
    date = Column(DateTime, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default=AppointmentStatus.SCHEDULED.value)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
