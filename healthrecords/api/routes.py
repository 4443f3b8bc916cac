# /healthrecords/api/routes.py

from flask_jwt_extended import jwt_required
from . import api_bp
from healthrecords.extensions import limiter
from healthrecords.utils.decorators import audit_log
from .controllers import (
    auth_controller, profile_controller, appointment_controller, record_controller,
    alert_controller, dashboard_controller, chat_controller
)


# --- Authentication Endpoints ---
@api_bp.route('/auth/register', methods=['POST'])
@limiter.limit("5 per hour")
@audit_log("USER_REGISTRATION", "users")
def register():
    return auth_controller.register_user()

@api_bp.route('/auth/login', methods=['POST'])
@limiter.limit("10 per minute")
@audit_log("USER_LOGIN", "authentication")
def login():
    return auth_controller.login_user()

@api_bp.route('/auth/logout', methods=['POST'])
@jwt_required()
@audit_log("USER_LOGOUT", "authentication")
def logout():
    return auth_controller.logout_user()

@api_bp.route('/auth/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    return auth_controller.refresh_token()


# --- Profile Endpoints ---
@api_bp.route('/profile', methods=['GET'])
@jwt_required()
@audit_log("VIEW_OWN_PROFILE", "users")
def get_profile():
    return profile_controller.get_profile()

@api_bp.route('/profile', methods=['PUT'])
@jwt_required()
@audit_log("UPDATE_OWN_PROFILE", "users")
def update_profile():
    return profile_controller.update_profile()

@api_bp.route('/preferences/language', methods=['GET'])
@jwt_required()
def get_language():
    return profile_controller.get_language()

@api_bp.route('/preferences/language', methods=['PUT'])
@jwt_required()
@audit_log("SET_LANGUAGE", "users")
def set_language():
    return profile_controller.set_language()


# --- Dashboard Endpoint ---
@api_bp.route('/dashboard', methods=['GET'])
@jwt_required()
def get_dashboard():
    return dashboard_controller.get_dashboard()


# --- Appointment Endpoints ---
@api_bp.route('/appointments', methods=['GET'])
@jwt_required()
@audit_log("VIEW_APPOINTMENTS", "appointments")
def get_appointments():
    return appointment_controller.get_appointments()

@api_bp.route('/appointments', methods=['POST'])
@jwt_required()
@audit_log("CREATE_APPOINTMENT", "appointments")
def create_appointment():
    return appointment_controller.create_appointment()


# --- Health Record Endpoints ---
@api_bp.route('/records', methods=['GET'])
@jwt_required()
@audit_log("VIEW_HEALTH_RECORDS", "health_records")
def get_records():
    return record_controller.search_user_records()

@api_bp.route('/records', methods=['POST'])
@jwt_required()
@audit_log("CREATE_HEALTH_RECORD", "health_records")
def create_record():
    return record_controller.create_record()

@api_bp.route('/records/<int:record_id>', methods=['GET'])
@jwt_required()
@audit_log("VIEW_HEALTH_RECORD", "health_records")
def get_record(record_id):
    return record_controller.get_record(record_id)

@api_bp.route('/records/<int:record_id>/medications', methods=['POST'])
@jwt_required()
@audit_log("ADD_MEDICATION", "medications")
def add_medication(record_id):
    return record_controller.add_medication(record_id)

@api_bp.route('/records/<int:record_id>/files', methods=['POST'])
@jwt_required()
@limiter.limit("20 per hour")
@audit_log("UPLOAD_RECORD_FILE", "health_files")
def upload_record_file(record_id):
    return record_controller.upload_record_file(record_id)

@api_bp.route('/records/files/<int:file_id>/download', methods=['GET'])
@jwt_required()
@audit_log("DOWNLOAD_RECORD_FILE", "health_files")
def download_record_file(file_id):
    return record_controller.download_record_file(file_id)


# --- Alert Endpoints ---
@api_bp.route('/alerts', methods=['GET'])
@jwt_required()
def get_alerts():
    return alert_controller.get_alerts()

@api_bp.route('/alerts', methods=['POST'])
@jwt_required()
@audit_log("CREATE_ALERT", "alerts")
def create_alert():
    return alert_controller.create_alert()


# --- Health Assistant Endpoints ---
@api_bp.route('/chat/messages', methods=['GET'])
@jwt_required()
def get_chat_messages():
    return chat_controller.get_messages()

@api_bp.route('/chat/messages', methods=['POST'])
@jwt_required()
@limiter.limit("30 per minute")
def send_chat_message():
    return chat_controller.submit_message()

@api_bp.route('/chat/messages', methods=['DELETE'])
@jwt_required()
@audit_log("CLEAR_CHAT", "chat")
def clear_chat_messages():
    return chat_controller.clear_messages()

@api_bp.route('/chat/status', methods=['GET'])
@jwt_required()
def get_chat_status():
    return chat_controller.get_status()
