import uuid
from flask import request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from healthrecords.models.enums import AppointmentStatus, AppointmentType
from healthrecords.utils.exceptions import ValidationError
from healthrecords.utils.store_util import StoreAdapter, StoreKey
from healthrecords.utils.view_filters import parse_datetime, partition_appointments, utc_now, parse_time

REQUIRED_FIELDS = ['doctor_name', 'hospital_name', 'date', 'time']

def _field(data, key):
    value = data.get(key)
    return str(value).strip() if value is not None else ''

def build_appointment(user_id, data, now=None):
    """Validates booking form data and returns the appointment to store.

    Video appointments get a generated meeting link; other types have none.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    if any(not _field(data, key) for key in REQUIRED_FIELDS):
        raise ValidationError("Please fill in all required fields")
    if parse_datetime(_field(data, 'date')) is None:
        raise ValidationError("date must be an ISO date (YYYY-MM-DD)", field='date')
    if parse_time(_field(data, 'time')) is None:
        raise ValidationError("time must be HH:MM", field='time')

    appointment_type = AppointmentType.parse(data.get('type'), 'type', default=AppointmentType.IN_PERSON)

    appointment = {
        'id': str(uuid.uuid4()),
        'user_id': int(user_id),
        'doctor_name': _field(data, 'doctor_name'),
        'hospital_name': _field(data, 'hospital_name'),
        'department': _field(data, 'department'),
        'date': _field(data, 'date'),
        'time': _field(data, 'time'),
        'type': appointment_type.value,
        'status': AppointmentStatus.SCHEDULED.value,
        'notes': _field(data, 'notes'),
        'created_at': (now or utc_now()).isoformat() + 'Z',
    }
    if appointment_type is AppointmentType.VIDEO:
        base = current_app.config.get('MEETING_LINK_BASE', 'https://meet.example.com').rstrip('/')
        appointment['meeting_link'] = f"{base}/{uuid.uuid4()}"
    return appointment

def create_appointment():
    """Books an appointment into the user's appointment collection."""
    user_id = int(get_jwt_identity())
    appointment = build_appointment(user_id, request.get_json(silent=True))

    StoreAdapter(user_id).append(StoreKey.APPOINTMENTS, appointment)
    current_app.logger.info(f"Appointment {appointment['id']} booked for user {user_id}")
    return jsonify({'message': 'Appointment booked successfully!', 'appointment': appointment}), 201

def get_appointments():
    """Upcoming (soonest first) and past or completed (most recent first)."""
    user_id = int(get_jwt_identity())
    appointments = StoreAdapter(user_id).read_list(StoreKey.APPOINTMENTS)
    upcoming, past = partition_appointments(appointments, utc_now())
    return jsonify({
        'upcoming': upcoming,
        'past': past,
        'total': len(appointments)
    }), 200
