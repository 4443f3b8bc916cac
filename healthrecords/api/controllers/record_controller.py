# /healthrecords/api/controllers/record_controller.py
from flask import request, jsonify, Response, stream_with_context
from flask_jwt_extended import get_jwt_identity
from werkzeug.utils import secure_filename
from healthrecords.models.enums import RecordType
from healthrecords.utils.record_service import RecordService
from healthrecords.utils.view_filters import ALL_TYPES, search_records

CONTENT_TYPES = {
    'pdf': 'application/pdf',
    'image': 'application/octet-stream',
    'doc': 'application/octet-stream',
}

def _service():
    return RecordService(get_jwt_identity())

def create_record():
    """Creates a health record for the logged-in user."""
    record = _service().create_record(request.get_json(silent=True))
    return jsonify({'message': 'Health record added successfully!', 'record': record}), 201

def search_user_records():
    """Search by title/doctor/hospital (``q``) and record type (``type``, default all)."""
    query = request.args.get('q', '')
    record_type = request.args.get('type', ALL_TYPES) or ALL_TYPES
    if record_type != ALL_TYPES:
        record_type = RecordType.parse(record_type, 'type').value

    records = search_records(_service().list_records(), query, record_type)
    return jsonify({
        'records': records,
        'count': len(records),
        'filters': {
            'q': query,
            'type': record_type
        }
    }), 200

def get_record(record_id):
    record = _service().get_record(record_id)
    return jsonify({'record': record.to_dict()}), 200

def add_medication(record_id):
    medication = _service().add_medication(record_id, request.get_json(silent=True))
    return jsonify({'message': 'Medication added', 'medication': medication}), 201

def upload_record_file(record_id):
    """Uploads a multipart ``file`` and attaches it to the record."""
    health_file = _service().upload_file(
        record_id,
        request.files.get('file'),
        request.form.get('description', '')
    )
    return jsonify({'message': 'File uploaded successfully', 'file': health_file}), 201

def download_record_file(file_id):
    health_file, chunks = _service().download_file(file_id)
    filename = secure_filename(health_file.name) or f"record-file-{health_file.id}"
    return Response(
        stream_with_context(chunks),
        mimetype=CONTENT_TYPES.get(health_file.type, 'application/octet-stream'),
        headers={'Content-Disposition': f'attachment; filename="{filename}"'}
    )
