import uuid
from flask import request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from healthrecords.models.enums import AlertPriority, AlertType
from healthrecords.utils.exceptions import ValidationError
from healthrecords.utils.store_util import StoreAdapter, StoreKey
from healthrecords.utils.view_filters import active_alerts, parse_datetime, utc_now

TRUE_VALUES = ('1', 'true', 'yes')
FALSE_VALUES = ('0', 'false', 'no', '')

def _parse_flag(value, field):
    if value is None or isinstance(value, bool):
        return bool(value)
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValidationError(f"{field} must be true or false", field=field)

def build_alert(user_id, data, now=None):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    for key in ('title', 'message', 'scheduled_for'):
        if not str(data.get(key) or '').strip():
            raise ValidationError("Please fill in all required fields", field=key)
    if parse_datetime(data['scheduled_for']) is None:
        raise ValidationError("scheduled_for must be an ISO datetime", field='scheduled_for')

    return {
        'id': str(uuid.uuid4()),
        'user_id': int(user_id),
        'type': AlertType.parse(data.get('type'), 'type').value,
        'title': str(data['title']).strip(),
        'message': str(data['message']).strip(),
        'scheduled_for': str(data['scheduled_for']).strip(),
        'is_read': _parse_flag(data.get('is_read'), 'is_read'),
        'priority': AlertPriority.parse(data.get('priority'), 'priority', default=AlertPriority.MEDIUM).value,
        'created_at': (now or utc_now()).isoformat() + 'Z',
    }

def create_alert():
    """Adds an alert to the user's alert collection."""
    user_id = int(get_jwt_identity())
    alert = build_alert(user_id, request.get_json(silent=True))
    StoreAdapter(user_id).append(StoreKey.ALERTS, alert)
    return jsonify({'message': 'Alert created', 'alert': alert}), 201

def get_alerts():
    """Active alerts by priority; ``?all=1`` returns the whole collection as stored."""
    user_id = int(get_jwt_identity())
    alerts = StoreAdapter(user_id).read_list(StoreKey.ALERTS)

    if request.args.get('all', '').lower() in TRUE_VALUES:
        return jsonify({'alerts': alerts, 'count': len(alerts)}), 200

    limit = request.args.get('limit', current_app.config['DASHBOARD_ITEM_LIMIT'], type=int)
    if limit is not None and limit <= 0:
        limit = None
    active = active_alerts(alerts, utc_now(), limit=limit)
    return jsonify({'alerts': active, 'count': len(active)}), 200
