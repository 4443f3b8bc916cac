"""Shared fixtures: a testing app on in-memory SQLite and registered users."""

import pytest

from healthrecords import create_app
from healthrecords.extensions import db


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def registration_payload(**overrides):
    payload = {
        'name': 'Asha Menon',
        'email': 'asha@example.com',
        'phone': '+91 98470 12345',
        'password': 'kerala2024',
        'user_type': 'migrant',
        'preferred_language': 'ml',
        'gender': 'female',
        'emergency_contact': {'name': 'Ravi', 'phone': '+91 98470 54321', 'relationship': 'brother'},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def register(client):
    """Register a user and return (user dict, auth headers)."""
    def _register(**overrides):
        response = client.post('/api/auth/register', json=registration_payload(**overrides))
        assert response.status_code == 201, response.get_json()
        body = response.get_json()
        return body['user'], {'Authorization': f"Bearer {body['access_token']}"}
    return _register


@pytest.fixture
def auth_headers(register):
    _, headers = register()
    return headers
