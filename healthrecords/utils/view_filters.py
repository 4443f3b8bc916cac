# /healthrecords/utils/view_filters.py
"""Pure list derivations for the appointment, record, alert and dashboard views.

Every function takes the full collection (plain dicts as stored) plus ``now``
and returns new lists; inputs are never modified. Dates are compared as naive
UTC datetimes.
"""
from datetime import datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from healthrecords.models.enums import AlertPriority, AppointmentStatus, PRIORITY_RANK

ALL_TYPES = 'all'


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO date or datetime string. Returns None for anything unreadable."""
    if isinstance(value, datetime):
        parsed = value
    elif not value or not isinstance(value, str):
        return None
    else:
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_time(value: Any) -> Optional[time]:
    if not value or not isinstance(value, str):
        return None
    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        return None


def appointment_when(appointment: Dict[str, Any]) -> Optional[datetime]:
    """Combine an appointment's date and time into one datetime.

    A date-only value with no readable time counts as midnight.
    """
    when = parse_datetime(appointment.get('date'))
    if when is None:
        return None
    at = parse_time(appointment.get('time'))
    if at is not None and when.time() == time(0, 0):
        when = datetime.combine(when.date(), at.replace(tzinfo=None))
    return when


def _ascending(items: Iterable[Dict[str, Any]], when_of) -> List[Dict[str, Any]]:
    # Undated items sort after dated ones.
    return sorted(items, key=lambda item: (when_of(item) is None, when_of(item) or datetime.min))


def _descending(items: Iterable[Dict[str, Any]], when_of) -> List[Dict[str, Any]]:
    return sorted(items, key=lambda item: (when_of(item) is not None, when_of(item) or datetime.min), reverse=True)


def is_upcoming(appointment: Dict[str, Any], now: datetime) -> bool:
    when = appointment_when(appointment)
    return (appointment.get('status') == AppointmentStatus.SCHEDULED.value
            and when is not None and when >= now)


def is_past_or_completed(appointment: Dict[str, Any], now: datetime) -> bool:
    # A scheduled appointment whose time has passed counts as past (missed).
    if appointment.get('status') == AppointmentStatus.COMPLETED.value:
        return True
    when = appointment_when(appointment)
    return when is not None and when < now


def partition_appointments(appointments: Iterable[Dict[str, Any]],
                           now: datetime) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Split appointments into (upcoming soonest-first, past most-recent-first)."""
    appointments = list(appointments)
    upcoming = [a for a in appointments if is_upcoming(a, now)]
    past = [a for a in appointments if is_past_or_completed(a, now)]
    return _ascending(upcoming, appointment_when), _descending(past, appointment_when)


def upcoming_appointments(appointments: Iterable[Dict[str, Any]], now: datetime,
                          limit: Optional[int] = None) -> List[Dict[str, Any]]:
    upcoming, _ = partition_appointments(appointments, now)
    return upcoming if limit is None else upcoming[:limit]


def priority_rank(alert: Dict[str, Any]) -> int:
    return PRIORITY_RANK.get(alert.get('priority'), PRIORITY_RANK[AlertPriority.LOW.value])


def is_active_alert(alert: Dict[str, Any], now: datetime) -> bool:
    scheduled_for = parse_datetime(alert.get('scheduled_for'))
    return not alert.get('is_read', False) and scheduled_for is not None and scheduled_for <= now


def active_alerts(alerts: Iterable[Dict[str, Any]], now: datetime,
                  limit: Optional[int] = 3) -> List[Dict[str, Any]]:
    """Unread, already-due alerts, most urgent first.

    ``sorted`` is stable with ``reverse=True`` too, so alerts of equal
    priority keep their collection order.
    """
    active = [a for a in alerts if is_active_alert(a, now)]
    ranked = sorted(active, key=priority_rank, reverse=True)
    return ranked if limit is None else ranked[:limit]


def _record_when(record: Dict[str, Any]) -> Optional[datetime]:
    return parse_datetime(record.get('date'))


def search_records(records: Iterable[Dict[str, Any]], query: str = '',
                   record_type: str = ALL_TYPES) -> List[Dict[str, Any]]:
    """Records whose title, doctor or hospital contains ``query`` (any case),
    restricted to ``record_type`` unless it is 'all'. Newest first."""
    needle = (query or '').lower()
    record_type = record_type or ALL_TYPES

    def matches(record):
        matches_search = any(
            needle in (record.get(field) or '').lower()
            for field in ('title', 'doctor_name', 'hospital_name')
        )
        matches_filter = record_type == ALL_TYPES or record.get('type') == record_type
        return matches_search and matches_filter

    return _descending([r for r in records if matches(r)], _record_when)


def recent_records(records: Iterable[Dict[str, Any]], limit: Optional[int] = 3) -> List[Dict[str, Any]]:
    ordered = _descending(records, _record_when)
    return ordered if limit is None else ordered[:limit]


def dashboard_summary(appointments: List[Dict[str, Any]], records: List[Dict[str, Any]],
                      alerts: List[Dict[str, Any]], now: datetime, limit: int = 3) -> Dict[str, Any]:
    upcoming = upcoming_appointments(appointments, now)
    active = active_alerts(alerts, now, limit=None)
    return {
        'stats': {
            'total_appointments': len(appointments),
            'health_records': len(records),
            'active_alerts': len(active),
            'upcoming_appointments': len(upcoming),
        },
        'upcoming_appointments': upcoming[:limit],
        'recent_records': recent_records(records, limit),
        'active_alerts': active[:limit],
    }
