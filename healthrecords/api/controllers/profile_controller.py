from flask import request, jsonify
from healthrecords.api.controllers.auth_controller import get_current_user
from healthrecords.utils.profile_session import ProfileSession
from healthrecords.utils.store_util import StoreAdapter

def _session():
    user = get_current_user()
    return ProfileSession(user, StoreAdapter(user.id))

def get_profile():
    return jsonify({'user': _session().snapshot()}), 200

def update_profile():
    """Partial update: only the supplied fields change."""
    data = request.get_json(silent=True)
    snapshot = _session().update(data if data is not None else {})
    return jsonify({'message': 'Profile updated successfully!', 'user': snapshot}), 200

def get_language():
    return jsonify({'language': _session().language()}), 200

def set_language():
    data = request.get_json(silent=True) or {}
    language = _session().set_language(data.get('language'))
    return jsonify({'language': language}), 200
