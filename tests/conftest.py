import os
import time

# Configuration is read at import time; keep the test run off any real database.
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret')
os.environ.setdefault('LOG_LEVEL', 'WARNING')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from agenda.database import Base, get_db  # noqa: E402
from agenda.main import app  # noqa: E402


@pytest.fixture
def api_client():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = testing_session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
        Base.metadata.drop_all(bind=engine)


def _signup(client: TestClient, name: str, email: str, password: str = 'hunter22') -> dict:
    response = client.post('/auth/signup', json={'name': name, 'email': email, 'password': password})
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def alice(api_client) -> dict:
    body = _signup(api_client, 'Alice', 'alice@example.com')
    return {'Authorization': f"Bearer {body['token']}"}


@pytest.fixture
def bob(api_client) -> dict:
    body = _signup(api_client, 'Bob', 'bob@example.com')
    return {'Authorization': f"Bearer {body['token']}"}


@pytest.fixture(params=['Pacific/Kiritimati', 'Pacific/Pago_Pago'])
def non_utc_timezone(request, monkeypatch):
    # UTC+14 and UTC-11: at any hour one of them sits on a different calendar day than UTC.
    monkeypatch.setenv('TZ', request.param)
    time.tzset()
    try:
        yield request.param
    finally:
        monkeypatch.undo()
        time.tzset()
