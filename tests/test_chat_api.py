from healthrecords import create_app
from healthrecords.extensions import db, socketio
from healthrecords.utils.advice_matcher import DEFAULT_ADVICE, FEVER_ADVICE, QUICK_QUESTIONS
from healthrecords.utils.chat_session import ChatSession, ChatSessionRegistry
from healthrecords.utils.store_util import StoreAdapter

from .conftest import registration_payload


def test_submit_returns_accepted_and_reply_lands(client, auth_headers):
    response = client.post('/api/chat/messages', headers=auth_headers, json={'content': 'I have a fever'})

    assert response.status_code == 202
    body = response.get_json()
    assert body['message']['role'] == 'user'
    assert body['message']['content'] == 'I have a fever'

    messages = client.get('/api/chat/messages', headers=auth_headers).get_json()['messages']
    assert [m['role'] for m in messages] == ['user', 'assistant']
    assert messages[1]['content'] == FEVER_ADVICE


def test_blank_message_is_rejected(client, auth_headers):
    response = client.post('/api/chat/messages', headers=auth_headers, json={'content': '  '})

    assert response.status_code == 400
    assert client.get('/api/chat/messages', headers=auth_headers).get_json()['count'] == 0


def test_submit_while_awaiting_reply_conflicts(app, client, auth_headers):
    pending = []
    app.extensions['chat_sessions'] = ChatSessionRegistry(
        lambda user_id: ChatSession(StoreAdapter(user_id), (0, 0), scheduler=lambda fn, *args: pending.append(fn))
    )

    assert client.post('/api/chat/messages', headers=auth_headers, json={'content': 'hi'}).status_code == 202
    assert client.get('/api/chat/status', headers=auth_headers).get_json()['state'] == 'awaiting_reply'

    response = client.post('/api/chat/messages', headers=auth_headers, json={'content': 'hello?'})
    assert response.status_code == 409
    assert client.get('/api/chat/messages', headers=auth_headers).get_json()['count'] == 1


def test_clear_chat(client, auth_headers):
    client.post('/api/chat/messages', headers=auth_headers, json={'content': 'fever'})

    response = client.delete('/api/chat/messages', headers=auth_headers)

    assert response.status_code == 200
    body = client.get('/api/chat/messages', headers=auth_headers).get_json()
    assert body['count'] == 0
    assert body['state'] == 'idle'


def test_chat_status_lists_quick_questions(client, auth_headers):
    body = client.get('/api/chat/status', headers=auth_headers).get_json()

    assert body['state'] == 'idle'
    assert body['quick_questions'] == QUICK_QUESTIONS
    assert body['emergency_contacts']['ambulance'] == '102 / 108'


def test_socket_chat_flow(app, client, register):
    _, headers = register()
    token = headers['Authorization'].split(' ', 1)[1]
    socket_client = socketio.test_client(app, query_string=f'token={token}')
    assert socket_client.is_connected()

    received = socket_client.get_received()
    assert received[0]['name'] == 'connected'

    socket_client.emit('send_message', {'content': 'hello'})
    events = {event['name']: event['args'][0] for event in socket_client.get_received()}
    assert events['assistant_message']['content'] == DEFAULT_ADVICE
    assert events['message_received']['message']['content'] == 'hello'

    socket_client.emit('clear_chat')
    assert socket_client.get_received()[0]['name'] == 'chat_cleared'
    assert client.get('/api/chat/messages', headers=headers).get_json()['count'] == 0

    socket_client.disconnect()


def test_socket_send_without_content_reports_error(app, register):
    _, headers = register()
    token = headers['Authorization'].split(' ', 1)[1]
    socket_client = socketio.test_client(app, query_string=f'token={token}')
    socket_client.get_received()

    socket_client.emit('send_message', {})

    received = socket_client.get_received()
    assert received[0]['name'] == 'error'
    socket_client.disconnect()


def test_socket_events_work_on_every_app_in_the_process(app):
    second_app = create_app('testing')
    with second_app.app_context():
        db.create_all()
        try:
            response = second_app.test_client().post('/api/auth/register', json=registration_payload())
            token = response.get_json()['access_token']

            socket_client = socketio.test_client(second_app, query_string=f'token={token}')
            assert socket_client.is_connected()
            assert socket_client.get_received()[0]['name'] == 'connected'

            socket_client.emit('send_message', {'content': 'fever'})
            names = [event['name'] for event in socket_client.get_received()]
            assert 'assistant_message' in names
            assert 'message_received' in names
            socket_client.disconnect()
        finally:
            db.session.remove()
            db.drop_all()
