"""Appointment validation and persistence, always scoped to one user."""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import NamedTuple

from pydantic import field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agenda.auth.session import SessionContext
from agenda.core.errors import NotFoundError, ValidationFailedError
from agenda.core.schemas import CamelModel
from agenda.models.appointment import (
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    Appointment,
    AppointmentStatus,
)

logger = logging.getLogger(__name__)

NOT_FOUND_DETAIL = 'Appointment not found.'
REQUIRED_FIELDS_DETAIL = 'Title, date, start time and end time are required.'


def to_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class AppointmentFilter(NamedTuple):
    """Half-open ``[start, end)`` window applied to ``Appointment.date``."""
    start: datetime | None = None
    end: datetime | None = None

    @classmethod
    def for_day(cls, day: date) -> 'AppointmentFilter':
        start = datetime.combine(day, time.min)
        return cls(start=start, end=start + timedelta(days=1))


class AppointmentDraft(CamelModel):
    title: str | None = None
    description: str | None = None
    date: datetime | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None

    @field_validator('date', 'start_time', 'end_time')
    @classmethod
    def normalize_datetime(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)


class AppointmentPatch(CamelModel):
    """Partial update; only fields present in the payload are applied."""
    title: str | None = None
    description: str | None = None
    date: datetime | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: str | None = None

    @field_validator('date', 'start_time', 'end_time')
    @classmethod
    def normalize_datetime(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)


def normalize_title(value: str | None) -> str:
    normalized = (value or '').strip()
    if not normalized:
        raise ValidationFailedError('Title is required.')
    if len(normalized) > MAX_TITLE_LENGTH:
        raise ValidationFailedError(f'Title must be {MAX_TITLE_LENGTH} characters or fewer.')
    return normalized


def normalize_description(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > MAX_DESCRIPTION_LENGTH:
        raise ValidationFailedError(f'Description must be {MAX_DESCRIPTION_LENGTH} characters or fewer.')

    return normalized


def normalize_status(value: str | None) -> str:
    normalized = (value or '').strip().upper()
    try:
        return AppointmentStatus(normalized).value
    except ValueError as exc:
        allowed = ', '.join(status.value for status in AppointmentStatus)
        raise ValidationFailedError(f'Status must be one of {allowed}.') from exc


def validate_time_range(start_time: datetime, end_time: datetime) -> None:
    if end_time <= start_time:
        raise ValidationFailedError('End time must be after start time.')


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def _owned_appointment(db: Session, session: SessionContext, appointment_id: int) -> Appointment:
    appointment = db.query(Appointment).filter(
        Appointment.id == appointment_id,
        Appointment.user_id == session.user_id,
    ).first()
    if appointment is None:
        raise NotFoundError(NOT_FOUND_DETAIL)
    return appointment


def list_appointments(
    db: Session,
    session: SessionContext,
    filters: AppointmentFilter | None = None,
) -> list[Appointment]:
    query = db.query(Appointment).filter(Appointment.user_id == session.user_id)

    if filters is not None:
        if filters.start is not None:
            query = query.filter(Appointment.date >= filters.start)
        if filters.end is not None:
            query = query.filter(Appointment.date < filters.end)

    return query.order_by(Appointment.start_time.asc(), Appointment.id.asc()).all()


def get_appointment(db: Session, session: SessionContext, appointment_id: int) -> Appointment:
    return _owned_appointment(db, session, appointment_id)


def create_appointment(db: Session, session: SessionContext, draft: AppointmentDraft) -> Appointment:
    if not (draft.title or '').strip() or draft.date is None or draft.start_time is None or draft.end_time is None:
        raise ValidationFailedError(REQUIRED_FIELDS_DETAIL)

    validate_time_range(draft.start_time, draft.end_time)

    appointment = Appointment(
        user_id=session.user_id,
        title=normalize_title(draft.title),
        description=normalize_description(draft.description),
        date=draft.date,
        start_time=draft.start_time,
        end_time=draft.end_time,
        status=AppointmentStatus.SCHEDULED.value,
    )
    db.add(appointment)
    _commit(db)
    db.refresh(appointment)

    logger.info('Created appointment %s for user %s', appointment.id, session.user_id)
    return appointment


def update_appointment(
    db: Session,
    session: SessionContext,
    appointment_id: int,
    patch: AppointmentPatch,
) -> Appointment:
    appointment = _owned_appointment(db, session, appointment_id)
    changes = patch.model_dump(exclude_unset=True)

    if 'title' in changes:
        changes['title'] = normalize_title(changes['title'])
    if 'description' in changes:
        changes['description'] = normalize_description(changes['description'])
    if 'status' in changes:
        changes['status'] = normalize_status(changes['status'])
    for field_name in ('date', 'start_time', 'end_time'):
        if field_name in changes and changes[field_name] is None:
            raise ValidationFailedError(f'{field_name.replace("_", " ").capitalize()} cannot be empty.')

    validate_time_range(
        changes.get('start_time', appointment.start_time),
        changes.get('end_time', appointment.end_time),
    )

    for field_name, value in changes.items():
        setattr(appointment, field_name, value)

    _commit(db)
    db.refresh(appointment)

    logger.info(
        'Updated appointment %s for user %s (%s)',
        appointment.id,
        session.user_id,
        ', '.join(sorted(changes)) or 'no changes',
    )
    return appointment


def delete_appointment(db: Session, session: SessionContext, appointment_id: int) -> None:
    appointment = _owned_appointment(db, session, appointment_id)
    db.delete(appointment)
    _commit(db)
    logger.info('Deleted appointment %s for user %s', appointment_id, session.user_id)
