from __future__ import annotations


class DealRoomError(Exception):
    """Base error for deal room operations."""


class ValidationError(DealRoomError):
    """Raised when required user input is missing or malformed. Nothing is written."""


class FormatError(DealRoomError):
    """Raised when a ciphertext or stored JSON blob cannot be parsed."""


class AuthorizationError(DealRoomError):
    """Raised when the actor is not allowed to perform the operation."""


class InvalidTransitionError(DealRoomError):
    """Raised for a status change out of a terminal state or to an illegal target."""


class NotFoundError(DealRoomError):
    """Raised when a record id has no stored record."""


class BackendUnavailableError(DealRoomError):
    """Raised when the ledger reports itself unavailable or cannot be reached."""


class UserDeclinedError(DealRoomError):
    """Raised by an account when the holder refuses to sign. Treated as cancellation."""


class TransactionError(DealRoomError):
    """Raised when a ledger write fails or is rejected."""

    def __init__(self, message: str, user_rejected: bool = False):
        super().__init__(message)
        self.user_rejected = user_rejected

    @classmethod
    def from_reason(cls, reason: str) -> "TransactionError":
        return cls(reason, user_rejected="user rejected" in reason.lower())


def describe_failure(action: str, exc: BaseException) -> str:
    """Human-readable banner text for a failed mutating operation."""
    if isinstance(exc, TransactionError) and exc.user_rejected:
        return "Transaction rejected by user"
    return f"{action} failed: {str(exc) or 'Unknown error'}"
