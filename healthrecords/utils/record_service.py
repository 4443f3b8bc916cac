# /healthrecords/utils/record_service.py
"""Health record CRUD against the database plus attachment storage in Cloudinary.

Every method is scoped to one user; records owned by somebody else behave as
missing. Database failures roll the session back and surface as
RecordServiceError so the caller can report a generic notice.
"""
from datetime import time

import httpx
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from healthrecords.extensions import db
from healthrecords.models.enums import RecordStatus, RecordType
from healthrecords.models.health_record_models import HealthFile, HealthRecord, Medication
from healthrecords.utils.cloudinary_util import cloudinary_manager
from healthrecords.utils.exceptions import NotFoundError, RecordServiceError, ValidationError
from healthrecords.utils.view_filters import parse_datetime

REQUIRED_RECORD_FIELDS = ('title', 'doctor_name', 'date')
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def _default_client():
    return httpx.Client(
        timeout=current_app.config.get('FILE_DOWNLOAD_TIMEOUT', 30),
        follow_redirects=True,
    )


def _text(data, field, default=''):
    value = data.get(field, default)
    if value is None:
        return default
    return str(value).strip()


def _parse_reminder_times(value):
    if value in (None, ''):
        return []
    if not isinstance(value, list):
        raise ValidationError("reminder_times must be a list of HH:MM strings", field='reminder_times')
    parsed = []
    for entry in value:
        try:
            parsed.append(time.fromisoformat(str(entry).strip()).strftime('%H:%M'))
        except ValueError:
            raise ValidationError(f"Invalid reminder time '{entry}'", field='reminder_times')
    return parsed


def _validate_date(value, field):
    if parse_datetime(value) is None:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)", field=field)
    return value


class RecordService:

    def __init__(self, user_id, http_client_factory=None):
        self.user_id = int(user_id)
        self._http_client_factory = http_client_factory or _default_client

    # --- Records ---

    def _commit(self, action):
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to {action}: {e}")
            raise RecordServiceError()

    def list_records(self):
        """All of the user's records with files and medications nested."""
        try:
            records = HealthRecord.query.filter_by(user_id=self.user_id).order_by(HealthRecord.id).all()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Failed to list health records: {e}")
            raise RecordServiceError()
        return [record.to_dict() for record in records]

    def get_record(self, record_id):
        record = db.session.get(HealthRecord, record_id)
        if record is None or record.user_id != self.user_id:
            raise NotFoundError("Health record not found")
        return record

    def create_record(self, data):
        """Create a record from request fields; returns it with its generated id."""
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        for field in REQUIRED_RECORD_FIELDS:
            if not _text(data, field):
                raise ValidationError("Please fill in all required fields", field=field)

        record_date = _validate_date(_text(data, 'date'), 'date')
        next_follow_up = _text(data, 'next_follow_up') or None
        if next_follow_up:
            _validate_date(next_follow_up, 'next_follow_up')

        record = HealthRecord(
            user_id=self.user_id,
            type=RecordType.parse(data.get('type'), 'type', default=RecordType.CHECKUP).value,
            title=_text(data, 'title'),
            description=_text(data, 'description'),
            doctor_name=_text(data, 'doctor_name'),
            hospital_name=_text(data, 'hospital_name'),
            date=record_date,
            next_follow_up=next_follow_up,
            status=RecordStatus.parse(data.get('status'), 'status', default=RecordStatus.COMPLETED).value,
        )
        for medication_data in data.get('medications') or []:
            record.medications.append(self._build_medication(medication_data))

        db.session.add(record)
        self._commit('create health record')
        current_app.logger.info(f"Health record {record.id} created for user {self.user_id}")
        return record.to_dict()

    # --- Medications ---

    def _build_medication(self, data):
        if not isinstance(data, dict):
            raise ValidationError("Medication must be an object", field='medications')
        if not _text(data, 'name'):
            raise ValidationError("Medication name is required", field='name')
        return Medication(
            name=_text(data, 'name'),
            dosage=_text(data, 'dosage'),
            frequency=_text(data, 'frequency'),
            duration=_text(data, 'duration'),
            instructions=_text(data, 'instructions'),
            reminder_times=_parse_reminder_times(data.get('reminder_times')),
        )

    def add_medication(self, record_id, data):
        record = self.get_record(record_id)
        medication = self._build_medication(data)
        record.medications.append(medication)
        self._commit('add medication')
        return medication.to_dict()

    # --- Files ---

    def upload_file(self, record_id, file, description=''):
        """Store ``file`` in Cloudinary and attach its descriptor to the record."""
        record = self.get_record(record_id)
        if file is None or not file.filename:
            raise ValidationError("No file provided", field='file')
        if cloudinary_manager.classify(file.filename) is None:
            raise ValidationError("File type not allowed", field='file')

        upload_result = cloudinary_manager.upload_record_file(file, self.user_id, record.id)
        if not upload_result['success']:
            raise RecordServiceError(upload_result['error'])

        health_file = HealthFile(
            record_id=record.id,
            name=file.filename,
            type=upload_result['file_type'],
            url=upload_result['url'],
            storage_path=upload_result['public_id'],
            resource_type=upload_result['resource_type'],
            size=upload_result['bytes'] or 0,
            description=description or '',
        )
        try:
            db.session.add(health_file)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to save file metadata: {e}")
            # Don't leave an orphaned blob behind
            cloudinary_manager.delete_record_file(upload_result['public_id'], upload_result['resource_type'])
            raise RecordServiceError()

        return health_file.to_dict()

    def get_file(self, file_id):
        health_file = db.session.get(HealthFile, file_id)
        if health_file is None or health_file.record.user_id != self.user_id:
            raise NotFoundError("File not found")
        return health_file

    def download_file(self, file_id):
        """Open the stored file and return (descriptor, iterator over its bytes).

        The upstream request is made before returning, so a failure is raised
        here rather than halfway through the response body.
        """
        health_file = self.get_file(file_id)
        client = self._http_client_factory()
        try:
            response = client.send(client.build_request('GET', health_file.url), stream=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            client.close()
            current_app.logger.error(f"Failed to download file {health_file.id}: {e}")
            raise RecordServiceError("Could not download the file. Please try again.")

        def stream():
            try:
                for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                    yield chunk
            finally:
                response.close()
                client.close()

        return health_file, stream()
