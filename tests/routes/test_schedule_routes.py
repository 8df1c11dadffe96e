def _upsert(client, headers, day='MONDAY', start='09:00', end='17:00', **extra):
    payload = {'dayOfWeek': day, 'startTime': start, 'endTime': end, **extra}
    return client.post('/schedules', json=payload, headers=headers)


def test_upsert_then_toggle_active(api_client, alice) -> None:
    created = _upsert(api_client, alice, isActive=True)
    toggled = _upsert(api_client, alice, isActive=False)

    assert created.status_code == 200
    assert toggled.status_code == 200
    assert toggled.json()['id'] == created.json()['id']

    schedules = api_client.get('/schedules', headers=alice).json()
    assert len(schedules) == 1
    assert schedules[0]['dayOfWeek'] == 'MONDAY'
    assert schedules[0]['isActive'] is False


def test_is_active_defaults_to_true(api_client, alice) -> None:
    response = _upsert(api_client, alice, day='SATURDAY', start='10:00', end='12:00')

    assert response.json()['isActive'] is True


def test_upsert_requires_fields(api_client, alice) -> None:
    response = api_client.post('/schedules', json={'dayOfWeek': 'MONDAY'}, headers=alice)

    assert response.status_code == 400
    assert response.json() == {'error': 'Day of week, start time and end time are required.'}


def test_list_is_sorted_by_weekday_and_scoped(api_client, alice, bob) -> None:
    for day in ('FRIDAY', 'MONDAY', 'WEDNESDAY'):
        _upsert(api_client, alice, day=day)
    _upsert(api_client, bob, day='TUESDAY')

    days = [item['dayOfWeek'] for item in api_client.get('/schedules', headers=alice).json()]

    assert days == ['MONDAY', 'WEDNESDAY', 'FRIDAY']


def test_delete_is_scoped_to_owner(api_client, alice, bob) -> None:
    schedule_id = _upsert(api_client, alice).json()['id']

    foreign = api_client.delete(f'/schedules/{schedule_id}', headers=bob)
    assert foreign.status_code == 404
    assert foreign.json() == {'error': 'Schedule not found.'}

    own = api_client.delete(f'/schedules/{schedule_id}', headers=alice)
    assert own.status_code == 200
    assert own.json() == {'message': 'Schedule deleted.'}
    assert api_client.get('/schedules', headers=alice).json() == []


def test_overnight_window_is_accepted(api_client, alice) -> None:
    response = _upsert(api_client, alice, day='FRIDAY', start='22:00', end='06:00')

    assert response.status_code == 200
    assert response.json()['startTime'] == '22:00'
    assert response.json()['endTime'] == '06:00'
