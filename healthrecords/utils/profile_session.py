# /healthrecords/utils/profile_session.py
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from healthrecords.extensions import db
from healthrecords.models.enums import Gender, Language, UserType
from healthrecords.models.user_models import User
from healthrecords.utils.encryption_util import encryptor
from healthrecords.utils.exceptions import StorageError, ValidationError
from healthrecords.utils.store_util import StoreKey

REQUIRED_PROFILE_FIELDS = ('name', 'email', 'phone')
EMERGENCY_CONTACT_FIELDS = ('name', 'phone', 'relationship')


def _clean(value):
    return value.strip() if isinstance(value, str) else value


def _emergency_contact_from(data, current=None):
    """Accepts a nested ``emergency_contact`` dict or the flat
    ``emergency_contact_<field>`` form fields."""
    contact = dict(current or {})
    nested = data.get('emergency_contact')
    if nested is not None:
        if not isinstance(nested, dict):
            raise ValidationError("emergency_contact must be an object", field='emergency_contact')
        for field in EMERGENCY_CONTACT_FIELDS:
            if field in nested:
                contact[field] = _clean(nested[field]) or ''
    for field in EMERGENCY_CONTACT_FIELDS:
        flat_key = f'emergency_contact_{field}'
        if flat_key in data:
            contact[field] = _clean(data[flat_key]) or ''
    return contact


def _touches_emergency_contact(data):
    return 'emergency_contact' in data or any(
        f'emergency_contact_{field}' in data for field in EMERGENCY_CONTACT_FIELDS
    )


def apply_profile_fields(user, data, partial=True):
    """Validate request data and copy it onto ``user``.

    With ``partial`` only the supplied keys are touched; otherwise the
    required fields must all be present. Enum fields are parsed into their
    closed sets here so nothing unvalidated reaches the model.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    for field in REQUIRED_PROFILE_FIELDS:
        present = field in data
        if (not partial and not present) or (present and not _clean(data[field])):
            raise ValidationError("Please fill in all required fields", field=field)

    if 'email' in data:
        email = _clean(data['email'])
        if not isinstance(email, str) or '@' not in email:
            raise ValidationError("Invalid email address", field='email')
        existing = User.find_by_email(email)
        if existing is not None and existing.id != user.id:
            raise ValidationError("Email already registered", field='email')

    contact = None
    if _touches_emergency_contact(data) or not partial:
        current = encryptor.decrypt_json(user.emergency_contact) if user.emergency_contact else None
        contact = _emergency_contact_from(data, current)

    # Parse every enum before mutating anything.
    user_type = UserType.parse(data.get('user_type'), 'user_type', default=UserType.MIGRANT) \
        if ('user_type' in data or not partial) else None
    language = Language.parse(data.get('preferred_language'), 'preferred_language', default=Language.ENGLISH) \
        if ('preferred_language' in data or not partial) else None
    gender = Gender.parse(data.get('gender'), 'gender', default=Gender.MALE) \
        if ('gender' in data or not partial) else None

    if 'name' in data:
        user.name = str(_clean(data['name']))
    if 'email' in data:
        user.set_email(_clean(data['email']))
    if 'phone' in data:
        user.phone = encryptor.encrypt(str(_clean(data['phone'])))
    if 'abha_id' in data:
        user.abha_id = encryptor.encrypt_optional(_clean(data['abha_id']))
    if 'date_of_birth' in data:
        user.date_of_birth = encryptor.encrypt_optional(_clean(data['date_of_birth']))
    if 'address' in data:
        user.address = encryptor.encrypt_optional(_clean(data['address']))
    if user_type is not None:
        user.user_type = user_type.value
    if language is not None:
        user.preferred_language = language.value
    if gender is not None:
        user.gender = gender.value

    if contact is not None:
        user.set_emergency_contact(contact)

    user.updated_at = datetime.utcnow()
    return user


class ProfileSession:
    """The signed-in user's profile plus the session-scoped store entries."""

    def __init__(self, user, store):
        self.user = user
        self.store = store

    def snapshot(self):
        return self.user.to_dict()

    def _commit(self):
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise StorageError()

    def remember(self):
        """Cache the profile under the current-user key (done at login)."""
        self.store.write(StoreKey.CURRENT_USER, self.snapshot())

    def update(self, data):
        """Merge the supplied fields into the profile and refresh updated_at."""
        apply_profile_fields(self.user, data, partial=True)
        self._commit()

        snapshot = self.snapshot()
        self.store.write(StoreKey.CURRENT_USER, snapshot)
        if 'preferred_language' in data:
            self.store.write(StoreKey.LANGUAGE_PREFERENCE, self.user.preferred_language)
        return snapshot

    def language(self):
        value = self.store.read(StoreKey.LANGUAGE_PREFERENCE, self.user.preferred_language)
        try:
            return Language.parse(value, 'language').value
        except ValidationError:
            return self.user.preferred_language

    def set_language(self, value):
        """Change the preferred language on the profile and in the store."""
        language = Language.parse(value, 'language')
        self.user.preferred_language = language.value
        self.user.updated_at = datetime.utcnow()
        self._commit()

        self.store.write(StoreKey.CURRENT_USER, self.snapshot())
        self.store.write(StoreKey.LANGUAGE_PREFERENCE, language.value)
        return language.value

    def clear(self):
        """Forget the cached profile (done at logout)."""
        self.store.remove(StoreKey.CURRENT_USER)
