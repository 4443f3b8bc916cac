import io

import cloudinary.uploader
import httpx
import pytest

from healthrecords.utils import record_service


def new_record(**overrides):
    payload = {
        'title': 'Cardiology consultation',
        'doctor_name': 'Dr. Thomas',
        'hospital_name': 'Amrita Hospital',
        'date': '2024-03-15',
        'type': 'consultation',
        'description': 'Routine follow up',
        'next_follow_up': '2024-06-15',
        'medications': [
            {'name': 'Atorvastatin', 'dosage': '10mg', 'frequency': 'Once daily', 'reminder_times': ['21:00']},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def record(client, auth_headers):
    response = client.post('/api/records', headers=auth_headers, json=new_record())
    assert response.status_code == 201
    return response.get_json()['record']


@pytest.fixture
def fake_upload(monkeypatch):
    calls = []

    def upload(file, **options):
        calls.append(options)
        return {
            'secure_url': 'https://res.cloudinary.com/demo/raw/upload/health_records/lab.pdf',
            'public_id': f"health_records/{options['public_id']}",
            'bytes': 2048,
        }

    monkeypatch.setattr(cloudinary.uploader, 'upload', upload)
    return calls


def upload(client, headers, record_id, filename='lab.pdf', content=b'%PDF-1.4 lab results'):
    return client.post(
        f'/api/records/{record_id}/files',
        headers=headers,
        data={'file': (io.BytesIO(content), filename), 'description': 'Lipid profile'},
        content_type='multipart/form-data',
    )


def test_create_record(record):
    assert record['id']
    assert record['status'] == 'completed'
    assert record['files'] == []
    assert record['medications'][0]['name'] == 'Atorvastatin'
    assert record['medications'][0]['reminder_times'] == ['21:00']


@pytest.mark.parametrize('overrides, field', [
    ({'title': ''}, 'title'),
    ({'doctor_name': None}, 'doctor_name'),
    ({'date': '15-03-2024'}, 'date'),
    ({'type': 'surgery'}, 'type'),
    ({'status': 'lost'}, 'status'),
    ({'medications': [{'dosage': '5mg'}]}, 'name'),
])
def test_create_record_validation(client, auth_headers, overrides, field):
    response = client.post('/api/records', headers=auth_headers, json=new_record(**overrides))

    assert response.status_code == 400
    assert response.get_json()['field'] == field
    assert client.get('/api/records', headers=auth_headers).get_json()['count'] == 0


def test_search_records(client, auth_headers):
    client.post('/api/records', headers=auth_headers, json=new_record())
    client.post('/api/records', headers=auth_headers, json=new_record(
        title='Lipid panel', hospital_name='Cardio Diagnostics', type='test', date='2024-04-01', medications=[]))
    client.post('/api/records', headers=auth_headers, json=new_record(
        title='Tetanus booster', doctor_name='Dr. Pillai', hospital_name='PHC', type='immunization', medications=[]))

    body = client.get('/api/records?q=cardio', headers=auth_headers).get_json()
    assert [r['title'] for r in body['records']] == ['Lipid panel', 'Cardiology consultation']

    body = client.get('/api/records?q=cardio&type=test', headers=auth_headers).get_json()
    assert [r['title'] for r in body['records']] == ['Lipid panel']

    body = client.get('/api/records?type=all', headers=auth_headers).get_json()
    assert body['count'] == 3

    assert client.get('/api/records?type=surgery', headers=auth_headers).status_code == 400


def test_get_record(client, auth_headers, record):
    response = client.get(f"/api/records/{record['id']}", headers=auth_headers)
    assert response.get_json()['record']['title'] == 'Cardiology consultation'


def test_records_of_other_users_are_not_found(client, record, register):
    _, other = register(email='other@example.com')

    assert client.get(f"/api/records/{record['id']}", headers=other).status_code == 404
    assert client.get('/api/records', headers=other).get_json()['count'] == 0


def test_add_medication(client, auth_headers, record):
    response = client.post(f"/api/records/{record['id']}/medications", headers=auth_headers, json={
        'name': 'Aspirin', 'dosage': '75mg', 'frequency': 'Daily', 'reminder_times': ['08:00:00']
    })

    assert response.status_code == 201
    assert response.get_json()['medication']['reminder_times'] == ['08:00']
    fetched = client.get(f"/api/records/{record['id']}", headers=auth_headers).get_json()['record']
    assert [m['name'] for m in fetched['medications']] == ['Atorvastatin', 'Aspirin']


def test_upload_file(client, auth_headers, record, fake_upload):
    response = upload(client, auth_headers, record['id'])

    assert response.status_code == 201
    health_file = response.get_json()['file']
    assert health_file['name'] == 'lab.pdf'
    assert health_file['type'] == 'pdf'
    assert health_file['size_formatted'] == '2.0 KB'
    assert health_file['description'] == 'Lipid profile'
    assert fake_upload[0]['resource_type'] == 'raw'

    fetched = client.get(f"/api/records/{record['id']}", headers=auth_headers).get_json()['record']
    assert [f['id'] for f in fetched['files']] == [health_file['id']]


def test_upload_rejects_unsupported_type(client, auth_headers, record, fake_upload):
    response = upload(client, auth_headers, record['id'], filename='setup.exe')

    assert response.status_code == 400
    assert fake_upload == []


def test_upload_failure_is_reported(client, auth_headers, record, monkeypatch):
    def failing_upload(file, **options):
        raise RuntimeError("cloudinary down")

    monkeypatch.setattr(cloudinary.uploader, 'upload', failing_upload)

    response = upload(client, auth_headers, record['id'])
    assert response.status_code == 502


def test_download_file(client, auth_headers, record, fake_upload, monkeypatch):
    health_file = upload(client, auth_headers, record['id']).get_json()['file']
    requested = []

    def handler(request):
        requested.append(str(request.url))
        return httpx.Response(200, content=b'%PDF-1.4 lab results')

    monkeypatch.setattr(record_service, '_default_client',
                        lambda: httpx.Client(transport=httpx.MockTransport(handler)))

    response = client.get(f"/api/records/files/{health_file['id']}/download", headers=auth_headers)

    assert response.status_code == 200
    assert response.data == b'%PDF-1.4 lab results'
    assert response.mimetype == 'application/pdf'
    assert 'lab.pdf' in response.headers['Content-Disposition']
    assert requested == [health_file['url']]


def test_download_upstream_failure(client, auth_headers, record, fake_upload, monkeypatch):
    health_file = upload(client, auth_headers, record['id']).get_json()['file']
    monkeypatch.setattr(record_service, '_default_client',
                        lambda: httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500))))

    response = client.get(f"/api/records/files/{health_file['id']}/download", headers=auth_headers)
    assert response.status_code == 502


def test_download_other_users_file_is_not_found(client, auth_headers, record, fake_upload, register):
    health_file = upload(client, auth_headers, record['id']).get_json()['file']
    _, other = register(email='other@example.com')

    response = client.get(f"/api/records/files/{health_file['id']}/download", headers=other)
    assert response.status_code == 404
