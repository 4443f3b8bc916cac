from datetime import datetime, timedelta


def iso(offset_hours):
    return (datetime.utcnow() + timedelta(hours=offset_hours)).isoformat() + 'Z'


def alert(**overrides):
    payload = {
        'type': 'medication',
        'title': 'Take Metformin',
        'message': '500mg after breakfast',
        'scheduled_for': iso(-1),
        'priority': 'high',
    }
    payload.update(overrides)
    return payload


def test_create_alert(client, auth_headers):
    response = client.post('/api/alerts', headers=auth_headers, json=alert())

    assert response.status_code == 201
    created = response.get_json()['alert']
    assert created['is_read'] is False
    assert created['priority'] == 'high'
    assert created['id']


def test_priority_defaults_to_medium(client, auth_headers):
    payload = alert()
    del payload['priority']

    response = client.post('/api/alerts', headers=auth_headers, json=payload)
    assert response.get_json()['alert']['priority'] == 'medium'


def test_invalid_alert(client, auth_headers):
    assert client.post('/api/alerts', headers=auth_headers, json=alert(priority='critical')).status_code == 400
    assert client.post('/api/alerts', headers=auth_headers, json=alert(type='reminder')).status_code == 400
    assert client.post('/api/alerts', headers=auth_headers, json=alert(scheduled_for='tomorrow')).status_code == 400
    assert client.post('/api/alerts', headers=auth_headers, json=alert(title='')).status_code == 400


def test_active_alerts_sorted_and_limited(client, auth_headers):
    for title, priority in [('a', 'low'), ('b', 'urgent'), ('c', 'medium'), ('d', 'high'), ('e', 'urgent')]:
        client.post('/api/alerts', headers=auth_headers, json=alert(title=title, priority=priority))
    client.post('/api/alerts', headers=auth_headers, json=alert(title='future', priority='urgent', scheduled_for=iso(24)))
    client.post('/api/alerts', headers=auth_headers, json=alert(title='read', priority='urgent', is_read=True))

    body = client.get('/api/alerts', headers=auth_headers).get_json()
    assert [a['title'] for a in body['alerts']] == ['b', 'e', 'd']

    body = client.get('/api/alerts?limit=10', headers=auth_headers).get_json()
    assert [a['title'] for a in body['alerts']] == ['b', 'e', 'd', 'c', 'a']

    body = client.get('/api/alerts?all=1', headers=auth_headers).get_json()
    assert body['count'] == 7


def test_is_read_accepts_booleans_and_their_string_forms(client, auth_headers):
    for value, expected in [(False, False), ('false', False), ('False', False), (True, True), ('true', True)]:
        response = client.post('/api/alerts', headers=auth_headers, json=alert(is_read=value))
        assert response.status_code == 201
        assert response.get_json()['alert']['is_read'] is expected

    response = client.post('/api/alerts', headers=auth_headers, json=alert(is_read='maybe'))
    assert response.status_code == 400
    assert response.get_json()['field'] == 'is_read'


def test_alert_sent_as_unread_string_is_active(client, auth_headers):
    client.post('/api/alerts', headers=auth_headers, json=alert(title='String flag', is_read='false'))

    body = client.get('/api/alerts', headers=auth_headers).get_json()
    assert [a['title'] for a in body['alerts']] == ['String flag']
