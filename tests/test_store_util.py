import pytest

from healthrecords.extensions import db
from healthrecords.models.store_models import UserStoreEntry
from healthrecords.utils.exceptions import StorageError
from healthrecords.utils.store_util import StoreAdapter, StoreKey


@pytest.fixture
def store(register):
    user, _ = register()
    return StoreAdapter(user['id'])


def test_missing_key_returns_a_copy_of_the_default(store):
    default = {'items': []}
    value = store.read(StoreKey.ALERTS, default)
    value['items'].append(1)

    assert default == {'items': []}
    assert store.read_list(StoreKey.ALERTS) == []


def test_write_replaces_the_whole_collection(store):
    store.write(StoreKey.APPOINTMENTS, [{'id': 'a'}])
    store.write(StoreKey.APPOINTMENTS, [{'id': 'b'}, {'id': 'c'}])

    assert store.read_list(StoreKey.APPOINTMENTS) == [{'id': 'b'}, {'id': 'c'}]
    assert UserStoreEntry.query.filter_by(user_id=store.user_id, key='appointments').count() == 1


def test_append(store):
    store.append(StoreKey.ALERTS, {'id': 1})
    store.append('alerts', {'id': 2})

    assert store.read_list(StoreKey.ALERTS) == [{'id': 1}, {'id': 2}]


def test_corrupt_entry_reads_as_default(store):
    db.session.add(UserStoreEntry(user_id=store.user_id, key='appointments', payload='{not json'))
    db.session.commit()

    assert store.read(StoreKey.APPOINTMENTS, 'fallback') == 'fallback'
    assert store.read_list(StoreKey.APPOINTMENTS) == []


def test_non_list_collection_reads_as_empty(store):
    store.write(StoreKey.CHAT_MESSAGES, {'oops': True})
    assert store.read_list(StoreKey.CHAT_MESSAGES) == []


def test_unserializable_value_raises_storage_error(store):
    with pytest.raises(StorageError):
        store.write(StoreKey.ALERTS, [object()])


def test_remove(store):
    store.write(StoreKey.LANGUAGE_PREFERENCE, 'ml')
    store.remove(StoreKey.LANGUAGE_PREFERENCE)
    store.remove(StoreKey.LANGUAGE_PREFERENCE)

    assert store.read(StoreKey.LANGUAGE_PREFERENCE) is None


def test_users_do_not_see_each_others_entries(store, register):
    other, _ = register(email='other@example.com')
    store.write(StoreKey.ALERTS, [{'id': 'mine'}])

    assert StoreAdapter(other['id']).read_list(StoreKey.ALERTS) == []


def test_unknown_key_is_rejected(store):
    with pytest.raises(ValueError):
        store.read('not-a-key')
