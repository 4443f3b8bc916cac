from functools import wraps
from flask import request, current_app, make_response
from healthrecords.models.system_models import AuditLog
from healthrecords.extensions import db
from flask_jwt_extended import get_jwt_identity
from sqlalchemy.exc import SQLAlchemyError
from healthrecords.utils.exceptions import HealthRecordsError

def _write_audit_entry(**fields):
    try:
        db.session.add(AuditLog(**fields))
        db.session.commit()
    except SQLAlchemyError as db_error:
        current_app.audit_logger.error(f"Failed to log audit entry due to DB error: {db_error}")
        db.session.rollback()

def audit_log(action, resource):
    """Records every call of the wrapped view in the audit table and audit log."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user_id = None
            ip_address = request.remote_addr
            user_agent = request.headers.get('User-Agent')

            try:
                # Attempt to get user_id from a valid JWT token
                identity = get_jwt_identity()
                user_id = int(identity) if identity is not None else None
            except RuntimeError:
                # No JWT token present (e.g., for registration or login)
                pass

            resource_id = kwargs.get('record_id') or kwargs.get('file_id')

            try:
                raw_response = f(*args, **kwargs)
                response = make_response(raw_response)

                success = response.status_code < 400
                details = f"Request successful. Status: {response.status_code}"

                # For a successful registration, get the new user_id from the response
                if action == "USER_REGISTRATION" and success and response.is_json:
                    user_id = response.get_json().get('user', {}).get('id')

                _write_audit_entry(
                    user_id=user_id,
                    action=action,
                    resource=resource,
                    resource_id=str(resource_id) if resource_id else None,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    success=success,
                    details=details
                )
                current_app.audit_logger.info(
                    f"Action='{action}', Resource='{resource}', UserID='{user_id}', Success='{success}', Details='{details}'"
                )

                return response

            except Exception as e:
                # Discard whatever the view left pending before writing the failure entry.
                db.session.rollback()
                if isinstance(e, HealthRecordsError):
                    details = f"Request failed. Status: {e.status_code}. {e.message}"
                else:
                    details = f"An error occurred: {str(e)}"

                _write_audit_entry(
                    user_id=user_id,
                    action=action,
                    resource=resource,
                    resource_id=str(resource_id) if resource_id else None,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    success=False,
                    details=details
                )
                current_app.audit_logger.error(
                    f"Action='{action}', Resource='{resource}', UserID='{user_id}', Success='False', Details='{details}'"
                )

                raise

        return decorated_function
    return decorator
