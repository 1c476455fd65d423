from __future__ import annotations


class SubCursorError(Exception):
    """Base class for errors raised by the window layer itself."""


class InvalidRange(SubCursorError, ValueError):
    """Raised when a window is built with a negative start or start > end."""


class OutOfBounds(SubCursorError, ValueError):
    """Raised when a seek target falls outside [0, window_length]."""


class BorrowConflict(SubCursorError, RuntimeError):
    """Raised when exclusive access is requested while it is already held."""


class OpenEndedWindowWarning(UserWarning):
    """Emitted when more than one open-ended window is alive on a handle."""
