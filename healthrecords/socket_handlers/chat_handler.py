# /healthrecords/socket_handlers/chat_handler.py
import logging
import time

from flask import request, current_app
from flask_jwt_extended import decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_socketio import emit, join_room, leave_room, disconnect
from jwt.exceptions import PyJWTError

from healthrecords.extensions import db, socketio
from healthrecords.models.system_models import RevokedToken
from healthrecords.models.user_models import User
from healthrecords.utils.chat_session import ChatSession, ChatSessionRegistry, run_inline
from healthrecords.utils.exceptions import HealthRecordsError
from healthrecords.utils.store_util import StoreAdapter

logger = logging.getLogger(__name__)


def init_chat_sessions(app):
    """Builds the per-user chat session registry for ``app``.

    Replies run as Socket.IO background tasks and are pushed to the user's
    room; with CHAT_REPLY_INLINE they run before submit returns.
    """
    delay_range = tuple(app.config['CHAT_REPLY_DELAY_RANGE'])
    inline = app.config.get('CHAT_REPLY_INLINE', False)

    def background(fn, *args):
        def run():
            with app.app_context():
                fn(*args)
        socketio.start_background_task(run)

    def factory(user_id):
        def push_reply(message):
            socketio.emit('assistant_message', message, room=f"user_{user_id}")

        return ChatSession(
            StoreAdapter(user_id),
            delay_range,
            scheduler=run_inline if inline else background,
            sleep=time.sleep if inline else socketio.sleep,
            on_reply=push_reply
        )

    app.extensions['chat_sessions'] = ChatSessionRegistry(factory)
    return app.extensions['chat_sessions']


def get_user_from_token():
    """Extract user from the JWT passed as ``?token=`` on the socket connection."""
    token = request.args.get('token')
    if not token:
        return None
    try:
        decoded_token = decode_token(token)
    except (JWTExtendedException, PyJWTError) as e:
        logger.warning(f"Token validation error: {e}")
        return None
    if RevokedToken.query.filter_by(jti=decoded_token['jti']).first() is not None:
        return None
    user = db.session.get(User, int(decoded_token['sub']))
    if not user or not user.is_active:
        return None
    return user


def _chat_session(user):
    return current_app.extensions['chat_sessions'].get(user.id)


def handle_connect():
    """Handle client connection."""
    user = get_user_from_token()
    if not user:
        emit('error', {'message': 'Authentication required'})
        disconnect()
        return

    # Personal room for assistant replies
    join_room(f"user_{user.id}")

    emit('connected', {
        'message': 'Connected successfully',
        'user_id': user.id,
        'state': _chat_session(user).state.value
    })
    logger.info(f"User {user.id} connected with session {request.sid}")


def handle_disconnect(reason=None):
    user = get_user_from_token()
    if user:
        leave_room(f"user_{user.id}")
        logger.info(f"User {user.id} disconnected from session {request.sid}")


def handle_send_message(data):
    """Queue a message for the health assistant."""
    user = get_user_from_token()
    if not user:
        emit('error', {'message': 'Authentication required'})
        return

    content = data.get('content') if isinstance(data, dict) else None
    session = _chat_session(user)
    try:
        message = session.submit(content)
    except HealthRecordsError as e:
        emit('error', {'message': e.message})
        return

    emit('message_received', {'message': message, 'state': session.state.value})


def handle_clear_chat(data=None):
    user = get_user_from_token()
    if not user:
        emit('error', {'message': 'Authentication required'})
        return

    session = _chat_session(user)
    try:
        session.clear()
    except HealthRecordsError as e:
        emit('error', {'message': e.message})
        return

    socketio.emit('chat_cleared', {'state': session.state.value}, room=f"user_{user.id}")


def register_socket_handlers(server):
    """Attach the chat events to the ``SocketIO`` extension ``server``.

    Must run after ``server.init_app``: handlers are bound to the server the
    app created, and each new app gets a new server.
    """
    server.on_event('connect', handle_connect)
    server.on_event('disconnect', handle_disconnect)
    server.on_event('send_message', handle_send_message)
    server.on_event('clear_chat', handle_clear_chat)
