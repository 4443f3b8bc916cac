# /healthrecords/utils/error_handlers.py
from flask import jsonify, current_app
from healthrecords.extensions import db
from healthrecords.utils.exceptions import HealthRecordsError, ValidationError

def register_error_handlers(app):
    @app.errorhandler(HealthRecordsError)
    def handle_health_records_error(error):
        # Nothing half-done may be flushed by a later commit in the same request.
        db.session.rollback()
        payload = {'error': error.message}
        if isinstance(error, ValidationError) and error.field:
            payload['field'] = error.field
        if error.status_code >= 500:
            current_app.logger.error(f"{type(error).__name__}: {error.message}")
        return jsonify(payload), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify({'error': 'Too many requests. Please slow down.'}), 429

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        current_app.audit_logger.error(f"Internal server error: {str(error)}")
        return jsonify({'error': 'Internal server error'}), 500
