"""
Exception types raised by the compensation engine.

``NotFoundError`` and ``InvalidAmountError`` are raised before any write.
``AlreadyProcessedError`` marks a duplicate trigger. ``TransactionAbortedError``
wraps a store failure after the transaction has been rolled back; callers
retry it at a higher layer.
"""


class CompensationError(Exception):
    """Base class for engine errors."""
    pass


class NotFoundError(CompensationError):
    """Raised when a participant, investment or slip does not exist."""
    pass


class AlreadyProcessedError(CompensationError):
    """Raised when an event has already been applied."""
    pass


class InvalidAmountError(CompensationError):
    """Raised when an amount is below the required threshold."""
    pass


class TransactionAbortedError(CompensationError):
    """Raised when the database transaction failed and was rolled back."""
    pass
