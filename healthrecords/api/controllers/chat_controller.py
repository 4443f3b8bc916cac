from flask import request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from healthrecords.utils.advice_matcher import EMERGENCY_CONTACTS, QUICK_QUESTIONS

def get_chat_session(user_id):
    return current_app.extensions['chat_sessions'].get(user_id)

def get_messages():
    session = get_chat_session(get_jwt_identity())
    messages = session.messages
    return jsonify({
        'messages': messages,
        'count': len(messages),
        'state': session.state.value
    }), 200

def submit_message():
    """Queues the user's message; the assistant reply arrives later."""
    data = request.get_json(silent=True) or {}
    session = get_chat_session(get_jwt_identity())
    message = session.submit(data.get('content'))
    return jsonify({'message': message, 'state': session.state.value}), 202

def clear_messages():
    session = get_chat_session(get_jwt_identity())
    session.clear()
    return jsonify({'message': 'Chat cleared', 'state': session.state.value}), 200

def get_status():
    session = get_chat_session(get_jwt_identity())
    return jsonify({
        'state': session.state.value,
        'quick_questions': QUICK_QUESTIONS,
        'emergency_contacts': EMERGENCY_CONTACTS
    }), 200
