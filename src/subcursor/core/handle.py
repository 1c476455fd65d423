"""Shared handle around one physical stream."""

from __future__ import annotations

import io
import warnings
import weakref
from typing import TYPE_CHECKING, Callable, TypeVar

from .guard import ExclusiveAccessGuard, make_guard
from .model import OpenEndedWindowWarning

if TYPE_CHECKING:
    from .cursor import SubCursor, SubCursorBuilder

T = TypeVar("T")


class SharedStreamHandle:
    """Owns one physical stream and hands out short exclusive borrows of it.

    Windows never touch the stream directly; every operation goes through
    ``with_exclusive_access`` so that no two windows interleave a seek and a
    read on the same stream.

    The handle never closes a stream it was given. With ``close_stream=True``
    it takes ownership: ``close()`` (or dropping the handle) closes the stream.
    """

    def __init__(self, stream, *, mode: str | None = None, guard: ExclusiveAccessGuard | None = None,
                 close_stream: bool = False):
        self._stream = stream
        self._guard = guard if guard is not None else make_guard(mode)
        self._open_ended: "weakref.WeakSet[SubCursor]" = weakref.WeakSet()
        self._finalizer = weakref.finalize(self, stream.close) if close_stream else None

    @property
    def mode(self) -> str:
        return getattr(self._guard, "mode", type(self._guard).__name__)

    def with_exclusive_access(self, operation: Callable[..., T]) -> T:
        """Run ``operation(stream)`` while holding the guard and return its result.

        Raises BorrowConflict when access cannot be granted. Errors raised by
        ``operation`` propagate unchanged after the guard is released.
        """
        with self._guard:
            return operation(self._stream)

    def current_length(self) -> int:
        """Length of the physical stream in bytes."""
        return self.with_exclusive_access(stream_length)

    def builder(self) -> "SubCursorBuilder":
        from .cursor import SubCursorBuilder
        return SubCursorBuilder(self)

    sub_cursor = builder

    @property
    def owns_stream(self) -> bool:
        return self._finalizer is not None

    def close(self) -> None:
        """Close the stream if this handle owns it; otherwise do nothing."""
        if self._finalizer is not None and self._finalizer.alive:
            with self._guard:
                self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # called by SubCursor.__init__ for windows without a fixed end
    def _register_open_ended(self, cursor: "SubCursor") -> None:
        if len(self._open_ended) > 0:
            warnings.warn(
                f"{len(self._open_ended)} open-ended window(s) already alive on this handle; "
                "only the most recent one may safely extend the stream",
                OpenEndedWindowWarning,
                stacklevel=3,
            )
        self._open_ended.add(cursor)

    def _forget(self, cursor: "SubCursor") -> None:
        self._open_ended.discard(cursor)

    def __repr__(self) -> str:
        return f"<SharedStreamHandle mode={self.mode} stream={self._stream!r}>"


def stream_length(stream) -> int:
    """Length of ``stream``, measured by seeking to its end."""
    return stream.seek(0, io.SEEK_END)
