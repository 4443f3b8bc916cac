# /healthrecords/utils/exceptions.py


class HealthRecordsError(Exception):
    """Base class for errors that are reported back to the user."""
    status_code = 500
    public_message = 'Something went wrong. Please try again.'

    def __init__(self, message=None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(HealthRecordsError):
    """Required field missing or value outside a closed set."""
    status_code = 400

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field


class NotFoundError(HealthRecordsError):
    status_code = 404
    public_message = 'Resource not found'


class StorageError(HealthRecordsError):
    """Per-user store read/write failed."""
    status_code = 500
    public_message = 'Could not save your changes. Please try again.'


class RecordServiceError(HealthRecordsError):
    """Record database or file storage call failed."""
    status_code = 502
    public_message = 'The health records service is unavailable. Please try again.'


class ChatBusyError(HealthRecordsError):
    """A message was submitted while the assistant is still replying."""
    status_code = 409
    public_message = 'Please wait for the assistant to reply.'
