from django.core.exceptions import ObjectDoesNotExist, ValidationError


class NotFound(ObjectDoesNotExist):
    """A referenced record (lawyer, client, consultation...) does not exist."""


class BookingConflict(ValidationError):
    """The lawyer already has a live consultation overlapping the requested slot."""

    default_message = 'The lawyer is unavailable at this time. Please choose a different time or lawyer.'

    def __init__(self, message=None, code='booking_conflict', params=None):
        super().__init__(message or self.default_message, code=code, params=params)
