import json
from datetime import date, datetime

import httpx
import pytest

from agenda.client import AgendaAPIError, AgendaClient, NotLoggedInError


def _appointment(appointment_id: int, title: str, day: str, start: str) -> dict:
    return {
        'id': appointment_id,
        'userId': 1,
        'title': title,
        'description': None,
        'date': f'{day}T00:00:00',
        'startTime': f'{day}T{start}:00',
        'endTime': f'{day}T23:00:00',
        'status': 'SCHEDULED',
    }


APPOINTMENTS = [
    _appointment(1, 'Past', '2024-06-01', '09:00'),
    _appointment(2, 'Today late', '2024-06-10', '15:00'),
    _appointment(3, 'Today early', '2024-06-10', '08:00'),
    _appointment(4, 'Next month', '2024-07-02', '10:00'),
]


class FakeApi:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.expire_token = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == '/auth/login':
            body = json.loads(request.content)
            if body['password'] != 'hunter22':
                return httpx.Response(401, json={'error': 'Invalid credentials.'})
            return httpx.Response(
                200,
                json={'token': 'tok-1', 'user': {'id': 1, 'name': 'Alice', 'email': body['email'], 'role': 'USER'}},
            )

        if self.expire_token or request.headers.get('Authorization') != 'Bearer tok-1':
            return httpx.Response(401, json={'error': 'Invalid token.'})

        if path == '/appointments' and request.method == 'GET':
            return httpx.Response(200, json=APPOINTMENTS)
        if path == '/appointments' and request.method == 'POST':
            body = json.loads(request.content)
            created = _appointment(9, body['title'], body['date'], '09:00')
            return httpx.Response(201, json=created)
        if path == '/appointments/99':
            return httpx.Response(404, json={'error': 'Appointment not found.'})
        if path == '/schedules' and request.method == 'GET':
            return httpx.Response(200, json=[])
        if path == '/schedules' and request.method == 'POST':
            body = json.loads(request.content)
            return httpx.Response(200, json={'id': 5, 'userId': 1, **body})
        return httpx.Response(500, json={'error': 'Internal server error.'})


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def client(fake_api):
    with AgendaClient('http://agenda.test', transport=httpx.MockTransport(fake_api)) as agenda_client:
        yield agenda_client


def test_calls_without_session_fail_locally(client, fake_api) -> None:
    with pytest.raises(NotLoggedInError) as exception_info:
        client.list_appointments()

    assert exception_info.value.status_code == 401
    assert fake_api.requests == []


def test_login_loads_session_and_sends_bearer(client, fake_api) -> None:
    session = client.login('alice@example.com', 'hunter22')

    assert session.user_id == 1
    assert client.is_authenticated
    client.list_appointments(day=date(2024, 6, 10))

    last = fake_api.requests[-1]
    assert last.headers['Authorization'] == 'Bearer tok-1'
    assert last.url.params['date'] == '2024-06-10'


def test_bad_login_raises_api_error(client) -> None:
    with pytest.raises(AgendaAPIError) as exception_info:
        client.login('alice@example.com', 'wrong')

    assert exception_info.value.status_code == 401
    assert exception_info.value.message == 'Invalid credentials.'
    assert not client.is_authenticated


def test_logout_clears_session(client) -> None:
    client.login('alice@example.com', 'hunter22')
    client.logout()

    assert client.session is None
    with pytest.raises(NotLoggedInError):
        client.list_schedules()


def test_server_side_401_drops_session(client, fake_api) -> None:
    client.login('alice@example.com', 'hunter22')
    fake_api.expire_token = True

    with pytest.raises(AgendaAPIError):
        client.list_appointments()

    assert client.session is None


def test_not_found_is_reported(client) -> None:
    client.login('alice@example.com', 'hunter22')

    with pytest.raises(AgendaAPIError) as exception_info:
        client.get_appointment(99)

    assert exception_info.value.status_code == 404


def test_create_appointment_sends_camel_case_payload(client, fake_api) -> None:
    client.login('alice@example.com', 'hunter22')

    created = client.create_appointment(
        'Team sync',
        date(2024, 6, 10),
        datetime(2024, 6, 10, 9, 0),
        datetime(2024, 6, 10, 9, 30),
    )

    body = json.loads(fake_api.requests[-1].content)
    assert set(body) == {'title', 'description', 'date', 'startTime', 'endTime'}
    assert created.title == 'Team sync'
    assert created.status == 'SCHEDULED'


def test_toggle_schedule_flips_active_flag(client, fake_api) -> None:
    client.login('alice@example.com', 'hunter22')
    schedule = client.upsert_schedule('MONDAY', '09:00', '17:00')

    toggled = client.toggle_schedule(schedule)

    body = json.loads(fake_api.requests[-1].content)
    assert body == {'dayOfWeek': 'MONDAY', 'startTime': '09:00', 'endTime': '17:00', 'isActive': False}
    assert toggled.is_active is False


def test_month_view_is_projected_locally(client) -> None:
    client.login('alice@example.com', 'hunter22')

    cells = client.month_view(2024, 6)

    assert len(cells) == 42
    by_day = {cell.day: cell for cell in cells}
    assert [item.title for item in by_day[date(2024, 6, 10)].appointments] == ['Today late', 'Today early']
    assert [item.title for item in by_day[date(2024, 7, 2)].appointments] == ['Next month']


def test_dashboard_combines_today_and_upcoming(client) -> None:
    client.login('alice@example.com', 'hunter22')

    dashboard = client.dashboard(now=datetime(2024, 6, 10, 12, 0), limit=2)

    assert [item.title for item in dashboard.today] == ['Today late', 'Today early']
    assert [item.title for item in dashboard.upcoming] == ['Today early', 'Today late']
    assert dashboard.schedules == []


def test_dashboard_defaults_to_utc_now(client, monkeypatch) -> None:
    client.login('alice@example.com', 'hunter22')
    monkeypatch.setattr('agenda.services.calendar.utc_now', lambda: datetime(2024, 6, 10, 23, 30))

    dashboard = client.dashboard()

    assert [item.title for item in dashboard.today] == ['Today late', 'Today early']
    assert [item.title for item in dashboard.upcoming][-1] == 'Next month'
