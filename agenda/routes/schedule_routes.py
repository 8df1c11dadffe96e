from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from agenda.auth.dependencies import get_current_session
from agenda.auth.session import SessionContext
from agenda.core.schemas import MessageResponse, ScheduleResponse
from agenda.database import get_db
from agenda.services import schedules as schedule_service
from agenda.services.schedules import ScheduleUpsert

router = APIRouter(tags=['schedules'])


@router.get('', response_model=list[ScheduleResponse])
def list_schedules(
    session: SessionContext = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return schedule_service.list_schedules(db, session)


@router.post('', response_model=ScheduleResponse)
def upsert_schedule(
    data: ScheduleUpsert,
    session: SessionContext = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return schedule_service.upsert_schedule(db, session, data)


@router.delete('/{schedule_id}', response_model=MessageResponse)
def delete_schedule(
    schedule_id: int,
    session: SessionContext = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    schedule_service.delete_schedule(db, session, schedule_id)
    return MessageResponse(message='Schedule deleted.')
