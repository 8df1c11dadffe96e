"""Weekly availability: one row per (user, day of week), written by upsert.

Windows are independent per day; an end time earlier than the start time is
an overnight window and is stored as given.
"""

import logging
import re

from pydantic import field_validator
from sqlalchemy import case
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from agenda.auth.session import SessionContext
from agenda.core.errors import NotFoundError, ValidationFailedError
from agenda.core.schemas import CamelModel
from agenda.models.schedule import DAY_ORDER, Schedule

logger = logging.getLogger(__name__)

NOT_FOUND_DETAIL = 'Schedule not found.'
REQUIRED_FIELDS_DETAIL = 'Day of week, start time and end time are required.'
CLOCK_TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')


class ScheduleUpsert(CamelModel):
    day_of_week: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    is_active: bool | None = None

    @field_validator('day_of_week', 'start_time', 'end_time')
    @classmethod
    def strip_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


def normalize_day_of_week(value: str) -> str:
    normalized = value.strip().upper()
    if normalized not in DAY_ORDER:
        raise ValidationFailedError('Invalid day of week.')
    return normalized


def normalize_clock_time(value: str) -> str:
    # Accept "9:00" as well as "09:00", and drop seconds from "09:00:00".
    parts = value.split(':')
    if len(parts) == 3 and parts[2] == '00':
        parts = parts[:2]
    candidate = ':'.join(parts)
    if len(parts) == 2 and len(parts[0]) == 1:
        candidate = f'0{candidate}'
    if not CLOCK_TIME_PATTERN.match(candidate):
        raise ValidationFailedError('Times must use the HH:MM 24-hour format.')
    return candidate


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def list_schedules(db: Session, session: SessionContext) -> list[Schedule]:
    day_rank = case(DAY_ORDER, value=Schedule.day_of_week, else_=len(DAY_ORDER))
    return (
        db.query(Schedule)
        .filter(Schedule.user_id == session.user_id)
        .order_by(day_rank.asc(), Schedule.id.asc())
        .all()
    )


def upsert_schedule(db: Session, session: SessionContext, data: ScheduleUpsert) -> Schedule:
    if not data.day_of_week or not data.start_time or not data.end_time:
        raise ValidationFailedError(REQUIRED_FIELDS_DETAIL)

    day_of_week = normalize_day_of_week(data.day_of_week)
    start_time = normalize_clock_time(data.start_time)
    end_time = normalize_clock_time(data.end_time)
    is_active = True if data.is_active is None else data.is_active

    schedule = db.query(Schedule).filter(
        Schedule.user_id == session.user_id,
        Schedule.day_of_week == day_of_week,
    ).first()

    if schedule is None:
        schedule = Schedule(
            user_id=session.user_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            is_active=is_active,
        )
        db.add(schedule)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent upsert inserted the same (user, day) first; update that row.
            db.rollback()
            schedule = db.query(Schedule).filter(
                Schedule.user_id == session.user_id,
                Schedule.day_of_week == day_of_week,
            ).one()
            schedule.start_time = start_time
            schedule.end_time = end_time
            schedule.is_active = is_active
            _commit(db)
        action = 'Created'
    else:
        schedule.start_time = start_time
        schedule.end_time = end_time
        schedule.is_active = is_active
        _commit(db)
        action = 'Updated'

    db.refresh(schedule)
    logger.info('%s schedule %s (%s) for user %s', action, schedule.id, day_of_week, session.user_id)
    return schedule


def delete_schedule(db: Session, session: SessionContext, schedule_id: int) -> None:
    schedule = db.query(Schedule).filter(
        Schedule.id == schedule_id,
        Schedule.user_id == session.user_id,
    ).first()
    if schedule is None:
        raise NotFoundError(NOT_FOUND_DETAIL)

    db.delete(schedule)
    _commit(db)
    logger.info('Deleted schedule %s for user %s', schedule_id, session.user_id)
