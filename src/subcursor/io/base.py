"""Base protocols and shared types for physical stream adapters."""

from typing import Protocol, runtime_checkable


class RangeNotSupportedError(RuntimeError):
    """Raised when server rejects Range and file size > RANGE_FALLBACK_MAX."""


RANGE_FALLBACK_MAX = 10 * 1024 * 1024  # 10 MB


@runtime_checkable
class PhysicalStream(Protocol):
    """Protocol for the random-access stream a SharedStreamHandle wraps.

    Any binary file object qualifies. The current length is taken as the
    offset returned by ``seek(0, SEEK_END)``.
    """

    def seek(self, offset: int, whence: int = 0) -> int:
        ...

    def tell(self) -> int:
        ...

    def readinto(self, buffer) -> int:
        """Read up to ``len(buffer)`` bytes at the current offset.
        A short count is allowed; 0 means end of stream.
        """
        ...

    def write(self, buffer) -> int:
        ...
