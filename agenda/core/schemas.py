"""Wire models shared by the routers and :mod:`agenda.client`."""

from datetime import datetime

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and renders ``startTime``-style keys on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class AppointmentResponse(CamelModel):
    id: int
    user_id: int
    title: str
    description: str | None = None
    date: datetime
    start_time: datetime
    end_time: datetime
    status: str


class ScheduleResponse(CamelModel):
    id: int
    user_id: int
    day_of_week: str
    start_time: str
    end_time: str
    is_active: bool


class MessageResponse(BaseModel):
    message: str
