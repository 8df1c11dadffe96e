"""Month-grid projection of already-fetched appointments.

Nothing here touches the database; the same functions back the
``/calendar`` routes and :class:`agenda.client.AgendaClient`.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Sequence

GRID_CELLS = 42
# The grid reaches into the neighbouring months, so it needs one spare year on each side.
MIN_YEAR = 2
MAX_YEAR = 9998
CELL_PREVIEW_SIZE = 2

STATUS_LABELS = {
    'SCHEDULED': 'Scheduled',
    'COMPLETED': 'Completed',
    'CANCELLED': 'Cancelled',
}


@dataclass(frozen=True)
class DayCell:
    day: date
    is_current_month: bool


@dataclass
class MonthCell:
    day: date
    is_current_month: bool
    appointments: list[Any] = field(default_factory=list)

    @property
    def preview(self) -> list[Any]:
        return self.appointments[:CELL_PREVIEW_SIZE]

    @property
    def overflow(self) -> int:
        return max(0, len(self.appointments) - CELL_PREVIEW_SIZE)


def utc_now() -> datetime:
    """Current time as naive UTC, the same representation appointments are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def calendar_day(value: date | datetime | str) -> date:
    """Reduce a date, datetime or ISO string to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def leading_days(year: int, month: int) -> int:
    """Number of previous-month cells before the 1st in a Sunday-first week."""
    return (date(year, month, 1).weekday() + 1) % 7


def build_month_grid(year: int, month: int) -> list[DayCell]:
    if not MIN_YEAR <= year <= MAX_YEAR or not 1 <= month <= 12:
        raise ValueError(f'Month {year}-{month:02d} is outside the supported calendar range.')

    first_day = date(year, month, 1)
    grid_start = first_day - timedelta(days=leading_days(year, month))

    cells = []
    for offset in range(GRID_CELLS):
        current = grid_start + timedelta(days=offset)
        cells.append(DayCell(day=current, is_current_month=(current.year, current.month) == (year, month)))
    return cells


def bucket_by_day(appointments: Iterable[Any], day: date | datetime | str) -> list[Any]:
    target = calendar_day(day)
    return [appointment for appointment in appointments if calendar_day(appointment.date) == target]


def upcoming(
    appointments: Iterable[Any],
    now: date | datetime,
    limit: int | None = None,
) -> list[Any]:
    today = calendar_day(now)
    selected = sorted(
        (appointment for appointment in appointments if calendar_day(appointment.date) >= today),
        key=lambda appointment: appointment.start_time,
    )
    if limit is None:
        return selected
    return selected[:max(0, limit)]


def build_month_view(year: int, month: int, appointments: Sequence[Any]) -> list[MonthCell]:
    by_day: dict[date, list[Any]] = {}
    for appointment in appointments:
        by_day.setdefault(calendar_day(appointment.date), []).append(appointment)

    return [
        MonthCell(
            day=cell.day,
            is_current_month=cell.is_current_month,
            appointments=by_day.get(cell.day, []),
        )
        for cell in build_month_grid(year, month)
    ]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)
