"""SubCursor - bounded, shareable windows over one random-access byte stream."""

from .core.model import SubCursorError, InvalidRange, OutOfBounds, BorrowConflict, OpenEndedWindowWarning
from .core.guard import CooperativeGuard, ThreadSafeGuard, DEFAULT_GUARD_MODE
from .core.handle import SharedStreamHandle
from .core.cursor import SubCursor, SubCursorBuilder, windows_from_entries
from .io import open_stream


def open_window(source, start: int = 0, end: int | None = None, *, mode: str | None = None,
                writable: bool = False, preserve: bool = True) -> SubCursor:
    """Open ``source`` (path, URL, or file-like object) and return a window over it.

    The window's handle owns what was opened here: ``window.handle.close()``
    releases it, as does dropping the last reference to the handle. File
    objects passed in by the caller are never closed.
    """
    stream = open_stream(source, writable=writable)
    handle = SharedStreamHandle(stream, mode=mode, close_stream=True)
    try:
        return SubCursor.builder(handle).start(start).end(end).preserve(preserve).build()
    except Exception:
        handle.close()
        raise


__all__ = [
    "open_window",
    "SharedStreamHandle", "SubCursor", "SubCursorBuilder", "windows_from_entries",
    "CooperativeGuard", "ThreadSafeGuard", "DEFAULT_GUARD_MODE",
    "SubCursorError", "InvalidRange", "OutOfBounds", "BorrowConflict", "OpenEndedWindowWarning",
]
