"""HTTP client for the Agenda API.

The client owns the caller's :class:`SessionContext`: ``login``/``signup``
load it, ``logout`` drops it, and every other call requires it.  Month and
dashboard views are projected locally from the fetched appointment list.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import httpx

from agenda.auth.session import SessionContext
from agenda.core import config
from agenda.core.schemas import AppointmentResponse, ScheduleResponse
from agenda.services import calendar

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class AgendaAPIError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f'{status_code}: {message}')
        self.status_code = status_code
        self.message = message


class NotLoggedInError(AgendaAPIError):
    """Raised before any request is sent when no session is loaded."""


@dataclass
class Dashboard:
    today: list[AppointmentResponse]
    upcoming: list[AppointmentResponse]
    schedules: list[ScheduleResponse]


class AgendaClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)
        self.session: SessionContext | None = None
        self.user: dict[str, Any] | None = None

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> 'AgendaClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Session lifecycle

    def signup(self, name: str, email: str, password: str) -> SessionContext:
        payload = self._request('POST', '/auth/signup', json={'name': name, 'email': email, 'password': password})
        return self._load_session(payload)

    def login(self, email: str, password: str) -> SessionContext:
        payload = self._request('POST', '/auth/login', json={'email': email, 'password': password})
        return self._load_session(payload)

    def logout(self) -> None:
        self.session = None
        self.user = None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    def _load_session(self, payload: dict) -> SessionContext:
        user = payload['user']
        self.session = SessionContext(
            user_id=user['id'],
            email=user['email'],
            role=user['role'],
            token=payload['token'],
        )
        self.user = user
        logger.debug('Loaded session for user %s', user['id'])
        return self.session

    # Appointments

    def list_appointments(self, day: date | None = None) -> list[AppointmentResponse]:
        params = {'date': day.isoformat()} if day is not None else None
        payload = self._request('GET', '/appointments', params=params, authenticated=True)
        return [AppointmentResponse.model_validate(item) for item in payload]

    def get_appointment(self, appointment_id: int) -> AppointmentResponse:
        payload = self._request('GET', f'/appointments/{appointment_id}', authenticated=True)
        return AppointmentResponse.model_validate(payload)

    def create_appointment(
        self,
        title: str,
        day: date,
        start_time: datetime,
        end_time: datetime,
        description: str | None = None,
    ) -> AppointmentResponse:
        body = {
            'title': title,
            'description': description,
            'date': day.isoformat(),
            'startTime': start_time.isoformat(),
            'endTime': end_time.isoformat(),
        }
        payload = self._request('POST', '/appointments', json=body, authenticated=True)
        return AppointmentResponse.model_validate(payload)

    def update_appointment(self, appointment_id: int, **changes: Any) -> AppointmentResponse:
        body = {}
        for name, value in changes.items():
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            body[_camel(name)] = value
        payload = self._request('PUT', f'/appointments/{appointment_id}', json=body, authenticated=True)
        return AppointmentResponse.model_validate(payload)

    def delete_appointment(self, appointment_id: int) -> None:
        self._request('DELETE', f'/appointments/{appointment_id}', authenticated=True)

    # Schedules

    def list_schedules(self) -> list[ScheduleResponse]:
        payload = self._request('GET', '/schedules', authenticated=True)
        return [ScheduleResponse.model_validate(item) for item in payload]

    def upsert_schedule(
        self,
        day_of_week: str,
        start_time: str,
        end_time: str,
        is_active: bool = True,
    ) -> ScheduleResponse:
        body = {'dayOfWeek': day_of_week, 'startTime': start_time, 'endTime': end_time, 'isActive': is_active}
        payload = self._request('POST', '/schedules', json=body, authenticated=True)
        return ScheduleResponse.model_validate(payload)

    def toggle_schedule(self, schedule: ScheduleResponse) -> ScheduleResponse:
        return self.upsert_schedule(
            schedule.day_of_week,
            schedule.start_time,
            schedule.end_time,
            is_active=not schedule.is_active,
        )

    def delete_schedule(self, schedule_id: int) -> None:
        self._request('DELETE', f'/schedules/{schedule_id}', authenticated=True)

    # Projections

    def month_view(self, year: int, month: int) -> list[calendar.MonthCell]:
        return calendar.build_month_view(year, month, self.list_appointments())

    def dashboard(self, now: datetime | None = None, limit: int = config.UPCOMING_LIMIT) -> Dashboard:
        now = now or calendar.utc_now()
        appointments = self.list_appointments()
        return Dashboard(
            today=calendar.bucket_by_day(appointments, now),
            upcoming=calendar.upcoming(appointments, now, limit),
            schedules=self.list_schedules(),
        )

    def _request(
        self,
        method: str,
        url: str,
        *,
        authenticated: bool = False,
        **kwargs: Any,
    ) -> Any:
        headers = {}
        if authenticated:
            if self.session is None:
                raise NotLoggedInError(401, 'Not logged in.')
            headers.update(self.session.authorization_header)

        response = self._http.request(method, url, headers=headers, **kwargs)
        if response.status_code == 401 and authenticated:
            self.logout()
        if response.is_error:
            try:
                message = response.json().get('error', response.reason_phrase)
            except ValueError:
                message = response.text or response.reason_phrase
            raise AgendaAPIError(response.status_code, message)
        return response.json()


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)
