"""Bounded window cursor over a SharedStreamHandle."""

from __future__ import annotations

import contextlib
import io
import operator
from typing import Callable, Dict, Iterable, Optional, Tuple, TypeVar

from .handle import SharedStreamHandle, stream_length
from .model import InvalidRange, OutOfBounds

T = TypeVar("T")

Entry = Tuple[int, Optional[int], str]          # (start, end, name)


class SubCursor(io.RawIOBase):
    """File-like view of ``[start, end)`` of a shared physical stream.

    Positions are always window-relative: ``tell()`` and ``seek()`` speak in
    local offsets and the absolute offset ``start + position`` is only ever
    used on the physical stream. With ``end=None`` the window is open-ended
    and its length follows the physical stream, re-measured at every
    operation that needs it.
    """

    def __init__(self, handle: SharedStreamHandle, start: int = 0, end: int | None = None,
                 *, preserve: bool = True):
        super().__init__()
        self._handle = handle
        # closed until fully built so a failed construction never reaches close()
        self._closed = True
        start = operator.index(start)
        if end is not None:
            end = operator.index(end)
        if start < 0:
            raise InvalidRange(f"Window start cannot be negative: {start}")
        if end is not None and end < start:
            raise InvalidRange(f"Window end {end} is before start {start}")
        self._start = start
        self._end = end
        self._position = 0
        self._preserve = bool(preserve)
        self._closed = False
        if end is None:
            handle._register_open_ended(self)

    @classmethod
    def builder(cls, handle: SharedStreamHandle) -> "SubCursorBuilder":
        return SubCursorBuilder(handle)

    # ------------------------------------------------------------------ #
    @property
    def start(self) -> int:
        return self._start

    @property
    def end(self) -> int | None:
        return self._end

    @property
    def is_open_ended(self) -> bool:
        return self._end is None

    @property
    def handle(self) -> SharedStreamHandle:
        return self._handle

    @property
    def preserve(self) -> bool:
        return self._preserve

    @property
    def position(self) -> int:
        return self._position

    @property
    def closed(self) -> bool:
        return self._closed

    def length(self) -> int:
        """Window length; open-ended windows measure the physical stream."""
        if self._end is not None:
            return self._end - self._start
        return self._open_length(self._borrow(stream_length))

    def is_empty(self) -> bool:
        return self.length() == 0

    def sub_cursor(self) -> "SubCursor":
        """New window over the same handle and bounds, positioned at 0."""
        return SubCursor(self._handle, self._start, self._end, preserve=self._preserve)

    # ------------------------------------------------------------------ #
    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed window")

    def _open_length(self, physical_length: int) -> int:
        # a start past the physical end is an empty window, not an error
        return max(physical_length - self._start, 0)

    def _window_length(self, stream) -> int:
        if self._end is not None:
            return self._end - self._start
        return self._open_length(stream_length(stream))

    def _remaining(self, window_length: int) -> int:
        return max(window_length - self._position, 0)

    def _borrow(self, body: Callable[..., T]) -> T:
        """Run ``body(stream)`` under exclusive access, restoring the stream
        position afterwards when ``preserve`` is set."""
        def operation(stream):
            saved = stream.tell() if self._preserve else None
            try:
                result = body(stream)
            except BaseException:
                # the failure from body is the one the caller sees
                if saved is not None:
                    with contextlib.suppress(OSError):
                        stream.seek(saved)
                raise
            if saved is not None:
                stream.seek(saved)
            return result
        return self._handle.with_exclusive_access(operation)

    # --------------------------- read ---------------------------------- #
    def readinto(self, buffer) -> int:
        self._check_open()
        with memoryview(buffer) as raw, raw.cast("B") as view:
            if len(view) == 0:
                return 0
            # bounded windows know they are exhausted without the stream
            if self._end is not None and self._remaining(self._end - self._start) == 0:
                return 0

            def body(stream) -> int:
                count = min(len(view), self._remaining(self._window_length(stream)))
                if count == 0:
                    return 0
                stream.seek(self._start + self._position)
                return stream.readinto(view[:count]) or 0

            count = self._borrow(body)
        self._position += count
        return count

    # --------------------------- write --------------------------------- #
    def write(self, buffer) -> int:
        """Write at the current position.

        Bounded windows never grow: bytes past ``end`` are dropped and the
        short count reports it. Open-ended windows write everything and may
        extend the physical stream.
        """
        self._check_open()
        with memoryview(buffer) as raw, raw.cast("B") as view:
            count = len(view)
            if count == 0:
                return 0
            if self._end is not None:
                count = min(count, self._remaining(self._end - self._start))
                if count == 0:
                    return 0

            def body(stream) -> int:
                stream.seek(self._start + self._position)
                return stream.write(view[:count]) or 0

            written = self._borrow(body)
        self._position += written
        return written

    # --------------------------- seek ---------------------------------- #
    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move to a window-relative position and return it.

        Targets outside ``[0, length()]`` raise OutOfBounds, except that an
        absolute seek on an open-ended window is clamped to its current
        length. Nothing is ever wrapped.
        """
        self._check_open()
        offset = operator.index(offset)
        length: int | None = None
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._position + offset
        elif whence == io.SEEK_END:
            length = self.length()
            target = length + offset
        else:
            raise ValueError(f"Invalid whence value: {whence}")

        if target < 0:
            raise OutOfBounds(f"Seek to {target} is before the start of the window")
        if length is None:
            length = self.length()
        if whence == io.SEEK_SET and self._end is None:
            target = min(target, length)
        if target > length:
            raise OutOfBounds(f"Seek to {target} is past the end of the window (length {length})")
        self._position = target
        return target

    def tell(self) -> int:
        self._check_open()
        return self._position

    def set_position(self, position: int) -> None:
        self.seek(position, io.SEEK_SET)

    # ------------------------------------------------------------------ #
    def seekable(self) -> bool:
        self._check_open()
        return True

    def readable(self) -> bool:
        self._check_open()
        return self._handle.with_exclusive_access(lambda s: getattr(s, "readable", lambda: True)())

    def writable(self) -> bool:
        self._check_open()
        return self._handle.with_exclusive_access(lambda s: getattr(s, "writable", lambda: True)())

    def flush(self) -> None:
        self._check_open()
        self._handle.with_exclusive_access(lambda s: getattr(s, "flush", lambda: None)())

    def close(self) -> None:
        """Mark the window closed. The handle and its stream are untouched."""
        # no implicit flush: close may run from __del__ while the guard is held
        if self._closed:
            return
        self._closed = True
        if self._end is None:
            self._handle._forget(self)

    def __str__(self) -> str:
        length = f"{self._start}.." if self._end is None else str(self._end - self._start)
        return f"SubCursor<{length}@{self._position}, preserve={str(self._preserve).lower()}>"

    def __repr__(self) -> str:
        return f"<SubCursor start={self._start} end={self._end} position={self._position}>"


class SubCursorBuilder:
    """``SubCursor.builder(handle).start(6).end(11).build()``"""

    def __init__(self, handle: SharedStreamHandle):
        self._handle = handle
        self._start = 0
        self._end: int | None = None
        self._preserve = True

    def start(self, value: int) -> "SubCursorBuilder":
        self._start = value
        return self

    def end(self, value: int | None) -> "SubCursorBuilder":
        self._end = value
        return self

    def preserve(self, value: bool = True) -> "SubCursorBuilder":
        self._preserve = value
        return self

    def build(self) -> SubCursor:
        return SubCursor(self._handle, self._start, self._end, preserve=self._preserve)


def windows_from_entries(handle: SharedStreamHandle, entries: Iterable[Entry],
                         *, preserve: bool = True) -> Dict[str, SubCursor]:
    """Build one window per ``(start, end, name)`` entry of a container."""
    windows: Dict[str, SubCursor] = {}
    for start, end, name in entries:
        if name in windows:
            raise ValueError(f"Duplicate entry name: {name!r}")
        windows[name] = SubCursor(handle, start, end, preserve=preserve)
    return windows
