# /healthrecords/utils/store_util.py
"""Durable per-user key/value store.

Each user owns one JSON document per logical key. Callers follow a
read-modify-write pattern: read the whole collection, change it, write the
whole collection back. Two writers updating the same key at once can lose an
update; this is only correct under the single-client, single-writer model the
app is built for and is not guarded against.
"""
import copy
import json
import logging
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from healthrecords.extensions import db
from healthrecords.models.store_models import UserStoreEntry
from healthrecords.utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class StoreKey(str, Enum):
    APPOINTMENTS = 'appointments'
    RECORDS = 'records'
    ALERTS = 'alerts'
    CHAT_MESSAGES = 'chat-messages'
    CURRENT_USER = 'current-user'
    LANGUAGE_PREFERENCE = 'language-preference'


def _key_name(key):
    if isinstance(key, StoreKey):
        return key.value
    return StoreKey(key).value


class StoreAdapter:
    """Reads and writes whole collections for a single user."""

    def __init__(self, user_id):
        self.user_id = int(user_id)

    def _entry(self, key):
        return UserStoreEntry.query.filter_by(user_id=self.user_id, key=_key_name(key)).first()

    def read(self, key, default=None):
        """Return the stored value, or a copy of ``default`` when missing or unreadable."""
        entry = self._entry(key)
        if entry is None:
            return copy.deepcopy(default)
        try:
            return json.loads(entry.payload)
        except (TypeError, ValueError):
            logger.warning("Corrupt store entry %s for user %s, using default", _key_name(key), self.user_id)
            return copy.deepcopy(default)

    def read_list(self, key):
        """Like read() for collections: anything that is not a list reads as empty."""
        value = self.read(key, [])
        if not isinstance(value, list):
            logger.warning("Store entry %s for user %s is not a list, using []", _key_name(key), self.user_id)
            return []
        return value

    def write(self, key, value):
        """Replace the stored value. Raises StorageError after rolling back on failure."""
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for '{_key_name(key)}' is not JSON serializable: {e}")

        try:
            entry = self._entry(key)
            if entry is None:
                entry = UserStoreEntry(user_id=self.user_id, key=_key_name(key), payload=payload)
                db.session.add(entry)
            else:
                entry.payload = payload
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Store write failed for %s/%s: %s", self.user_id, _key_name(key), e)
            raise StorageError()

    def append(self, key, item):
        """Read the collection, append ``item`` and write it back. Returns the new collection."""
        collection = self.read_list(key)
        collection.append(item)
        self.write(key, collection)
        return collection

    def remove(self, key):
        """Drop the entry for ``key``; missing keys are ignored."""
        try:
            entry = self._entry(key)
            if entry is not None:
                db.session.delete(entry)
                db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Store delete failed for %s/%s: %s", self.user_id, _key_name(key), e)
            raise StorageError()
