import typing

from healthrecords.utils.encryption_util import Encryptor, encryptor


def test_json_round_trip(app):
    token = encryptor.encrypt_json({'name': 'Ravi', 'phone': '+91 98470 54321'})

    assert 'Ravi' not in token
    assert encryptor.decrypt_json(token) == {'name': 'Ravi', 'phone': '+91 98470 54321'}


def test_empty_and_invalid_tokens_decrypt_to_none(app):
    assert encryptor.decrypt('') is None
    assert encryptor.decrypt('not-a-fernet-token') is None
    assert encryptor.decrypt_json(None) is None
    assert encryptor.encrypt_optional('') is None


def test_return_annotations_resolve():
    # Evaluating the hints fails on interpreters without PEP 604 unions.
    assert typing.get_type_hints(Encryptor.decrypt)['return'] == typing.Optional[str]
    assert typing.get_type_hints(Encryptor.decrypt_json)['return'] == typing.Optional[dict]
