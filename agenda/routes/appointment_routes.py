from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from agenda.auth.dependencies import get_current_session
from agenda.auth.session import SessionContext
from agenda.core.schemas import AppointmentResponse, MessageResponse
from agenda.database import get_db
from agenda.services import appointments as appointment_service
from agenda.services.appointments import AppointmentDraft, AppointmentFilter, AppointmentPatch

router = APIRouter(tags=['appointments'])


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    day: date | None = Query(default=None, alias='date'),
    session: SessionContext = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    filters = AppointmentFilter.for_day(day) if day is not None else None
    return appointment_service.list_appointments(db, session, filters)


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: AppointmentDraft,
    session: SessionContext = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return appointment_service.create_appointment(db, session, data)


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    session: SessionContext = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return appointment_service.get_appointment(db, session, appointment_id)


@router.put('/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    data: AppointmentPatch,
    session: SessionContext = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return appointment_service.update_appointment(db, session, appointment_id, data)


@router.delete('/{appointment_id}', response_model=MessageResponse)
def delete_appointment(
    appointment_id: int,
    session: SessionContext = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    appointment_service.delete_appointment(db, session, appointment_id)
    return MessageResponse(message='Appointment deleted.')
