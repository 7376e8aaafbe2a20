# blood/exceptions.py
import logging
from functools import wraps

from django.db import DatabaseError

logger = logging.getLogger(__name__)


class BloodBankError(Exception):
    """Base for every rejection the core reports back to its caller."""

    default_message = "Operation failed."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidArgument(BloodBankError):
    default_message = "Invalid input."


class NotFound(BloodBankError):
    default_message = "Record not found."


class Conflict(BloodBankError):
    default_message = "The change conflicts with existing records."


class InsufficientInventory(Conflict):
    default_message = "Not enough inventory to fulfill request."


class DonationConsumed(Conflict):
    default_message = "Cannot delete donation because inventory is already used."


class ImmutableFulfilledRequest(Conflict):
    default_message = "Cannot modify a fulfilled request."


class StorageFailure(BloodBankError):
    default_message = "Storage failure, please retry."


def storage_guard(func):
    """Re-raise database errors escaping ``func`` as StorageFailure."""

    @wraps(func)
    def _wrapped(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("storage failure in %s", func.__qualname__)
            raise StorageFailure() from exc
    return _wrapped
