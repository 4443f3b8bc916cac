from flask import jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from healthrecords.api.controllers.auth_controller import get_current_user
from healthrecords.utils.record_service import RecordService
from healthrecords.utils.store_util import StoreAdapter, StoreKey
from healthrecords.utils.view_filters import dashboard_summary, utc_now

def get_dashboard():
    """Greeting, stats and the first few upcoming appointments, records and alerts."""
    user = get_current_user()
    store = StoreAdapter(user.id)

    summary = dashboard_summary(
        store.read_list(StoreKey.APPOINTMENTS),
        RecordService(get_jwt_identity()).list_records(),
        store.read_list(StoreKey.ALERTS),
        utc_now(),
        limit=current_app.config['DASHBOARD_ITEM_LIMIT']
    )
    summary['user'] = {
        'id': user.id,
        'name': user.name,
        'preferred_language': user.preferred_language
    }
    return jsonify(summary), 200
