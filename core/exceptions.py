"""Typed exceptions for sale recording and reporting."""


class POSError(Exception):
    """Base class for point-of-sale business-rule and storage errors."""


class ValidationError(POSError):
    """
    Input was rejected before any write was attempted.

    Missing staff member, empty service selection, required field absent.
    The caller keeps its form state so the operator can fix and resubmit.
    Distinct from pydantic.ValidationError, which covers request parsing.
    """


class InvalidAmountError(ValidationError):
    """A money amount is negative, NaN, infinite or not a number at all."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid amount: {value!r}")


class InvalidRateError(ValidationError):
    """A commission rate falls outside 0-100% once normalized."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid commission rate: {value!r}")


class NotFoundError(POSError):
    """Edit or delete target no longer exists."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type.capitalize()} {entity_id} not found")


class WriteError(POSError):
    """
    The underlying store rejected or failed a write.

    Network, permission or quota failures all land here. Never retried
    automatically; the operator resubmits.
    """
