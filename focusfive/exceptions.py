"""
FocusFive exception definitions.

Hierarchy of errors raised by the persistence core:
- FocusFiveError: base class for every known failure
- InvalidFormat: markdown without a date header, or an out-of-bounds parameter
- IoFailure: filesystem operation failed
- SerializationFailure: a sidecar document could not be decoded
- PreconditionViolation: a structural rule would be broken (6th action, last action, bad score)
- NotFound: a required file does not exist
"""
from typing import Optional


class FocusFiveError(Exception):
    """Base class for all FocusFive errors.

    Catching this handles every expected failure of the core.
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        """
        Args:
            message: what went wrong
            hint: suggestion for the user
        """
        super().__init__(message)
        self.message = message
        self.hint = hint

    def get_user_message(self) -> str:
        """Return a user-facing message."""
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class InvalidFormat(FocusFiveError):
    """Markdown is malformed or a parameter fell outside its bounds."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, hint)


class IoFailure(FocusFiveError):
    """A filesystem operation failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        hint = f"Check permissions and free space for: {path}" if path else None
        super().__init__(message, hint)
        self.path = path


class SerializationFailure(FocusFiveError):
    """A sidecar file is corrupt or carries an unsupported version."""

    def __init__(self, message: str, path: Optional[str] = None):
        hint = f"The file may be corrupted: {path}" if path else "The data may be corrupted"
        super().__init__(message, hint)
        self.path = path


class PreconditionViolation(FocusFiveError):
    """An operation would break a structural rule."""

    def __init__(self, message: str):
        super().__init__(message, hint=None)


class NotFound(FocusFiveError):
    """A file required by the operation is missing."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, hint=None)
        self.path = path
