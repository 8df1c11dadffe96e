from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from agenda.auth.dependencies import get_current_session
from agenda.auth.session import SessionContext
from agenda.core import config
from agenda.core.schemas import AppointmentResponse, CamelModel
from agenda.database import get_db
from agenda.services import appointments as appointment_service
from agenda.services import calendar
from agenda.services.appointments import AppointmentFilter

router = APIRouter(tags=['calendar'])

MAX_UPCOMING_LIMIT = 50


class CalendarCellResponse(CamelModel):
    date: date
    is_current_month: bool
    appointments: list[AppointmentResponse]
    overflow: int


class MonthViewResponse(CamelModel):
    year: int
    month: int
    previous: tuple[int, int]
    next: tuple[int, int]
    cells: list[CalendarCellResponse]


@router.get('/upcoming', response_model=list[AppointmentResponse])
def list_upcoming(
    limit: int = Query(default=config.UPCOMING_LIMIT, ge=1, le=MAX_UPCOMING_LIMIT),
    session: SessionContext = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    now = calendar.utc_now()
    filters = AppointmentFilter(start=datetime.combine(now.date(), datetime.min.time()))
    appointments = appointment_service.list_appointments(db, session, filters)
    return calendar.upcoming(appointments, now, limit)


@router.get('/{year}/{month}', response_model=MonthViewResponse)
def month_view(
    year: int = Path(ge=calendar.MIN_YEAR, le=calendar.MAX_YEAR),
    month: int = Path(ge=1, le=12),
    session: SessionContext = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    grid = calendar.build_month_grid(year, month)
    window_start = datetime.combine(grid[0].day, datetime.min.time())
    window_end = datetime.combine(grid[-1].day, datetime.min.time()) + timedelta(days=1)
    appointments = appointment_service.list_appointments(
        db,
        session,
        AppointmentFilter(start=window_start, end=window_end),
    )

    cells = calendar.build_month_view(year, month, appointments)
    return MonthViewResponse(
        year=year,
        month=month,
        previous=calendar.shift_month(year, month, -1),
        next=calendar.shift_month(year, month, 1),
        cells=[
            CalendarCellResponse(
                date=cell.day,
                is_current_month=cell.is_current_month,
                appointments=[AppointmentResponse.model_validate(item) for item in cell.appointments],
                overflow=cell.overflow,
            )
            for cell in cells
        ],
    )
