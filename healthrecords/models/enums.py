# /healthrecords/models/enums.py
from enum import Enum

from healthrecords.utils.exceptions import ValidationError


class ChoiceEnum(str, Enum):
    """String enum that can parse raw request values."""

    @classmethod
    def parse(cls, value, field=None, default=None):
        """Return the member for ``value`` or raise ValidationError.

        ``None`` and empty strings fall back to ``default`` when one is given.
        """
        if value is None or value == '':
            if default is not None:
                return cls(default)
            raise ValidationError(f"{field or cls.__name__} is required", field=field)
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ', '.join(m.value for m in cls)
            raise ValidationError(
                f"Invalid {field or cls.__name__} '{value}'. Expected one of: {allowed}",
                field=field,
            )

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class UserType(ChoiceEnum):
    MIGRANT = 'migrant'
    LOCAL = 'local'
    RETURNING_INDIAN = 'returning_indian'
    FOREIGNER = 'foreigner'


class Language(ChoiceEnum):
    ENGLISH = 'en'
    MALAYALAM = 'ml'
    HINDI = 'hi'
    TAMIL = 'ta'


class Gender(ChoiceEnum):
    MALE = 'male'
    FEMALE = 'female'
    OTHER = 'other'


class AppointmentType(ChoiceEnum):
    IN_PERSON = 'in-person'
    VIDEO = 'video'
    PHONE = 'phone'


class AppointmentStatus(ChoiceEnum):
    SCHEDULED = 'scheduled'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    NO_SHOW = 'no-show'


class RecordType(ChoiceEnum):
    CHECKUP = 'checkup'
    TEST = 'test'
    IMMUNIZATION = 'immunization'
    CONSULTATION = 'consultation'
    EMERGENCY = 'emergency'


class RecordStatus(ChoiceEnum):
    COMPLETED = 'completed'
    PENDING = 'pending'
    CANCELLED = 'cancelled'


class FileType(ChoiceEnum):
    PDF = 'pdf'
    IMAGE = 'image'
    DOC = 'doc'


class AlertType(ChoiceEnum):
    MEDICATION = 'medication'
    APPOINTMENT = 'appointment'
    CHECKUP = 'checkup'
    EMERGENCY = 'emergency'
    VACCINATION = 'vaccination'


class AlertPriority(ChoiceEnum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    URGENT = 'urgent'


PRIORITY_RANK = {
    AlertPriority.URGENT.value: 4,
    AlertPriority.HIGH.value: 3,
    AlertPriority.MEDIUM.value: 2,
    AlertPriority.LOW.value: 1,
}


class ChatRole(ChoiceEnum):
    USER = 'user'
    ASSISTANT = 'assistant'
