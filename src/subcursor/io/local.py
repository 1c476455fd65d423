"""Local file and in-memory physical streams."""

import io
from pathlib import Path
from typing import BinaryIO, Union

from .base import PhysicalStream


class LocalStream:
    """Physical stream over a local file path or an open binary file object."""

    def __init__(self, source: Union[Path, str, BinaryIO], *, writable: bool = False):
        self.bytes_fetched = 0
        self.bytes_written = 0
        self.requests_made = 0
        self._should_close_file = False

        if hasattr(source, 'read'):
            # BinaryIO object, owned by the caller
            self._file = source
            self.name = getattr(source, 'name', repr(source))
        else:
            # Path or str
            self._file = open(source, 'r+b' if writable else 'rb')
            self._should_close_file = True
            self.name = str(source)

        if not self._file.seekable():
            if self._should_close_file:
                self._file.close()
            raise IOError("File is not seekable, cannot expose windows over it")

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        return self._file.seek(offset, whence)

    def tell(self) -> int:
        return self._file.tell()

    def readinto(self, buffer) -> int:
        self.requests_made += 1
        count = self._file.readinto(buffer) or 0
        self.bytes_fetched += count
        return count

    def write(self, buffer) -> int:
        self.requests_made += 1
        count = self._file.write(buffer) or 0
        self.bytes_written += count
        return count

    def flush(self) -> None:
        self._file.flush()

    def readable(self) -> bool:
        return self._file.readable()

    def writable(self) -> bool:
        return self._file.writable()

    @property
    def size(self) -> int:
        """Return the total size of the source in bytes."""
        current_pos = self._file.tell()
        try:
            return self._file.seek(0, io.SEEK_END)
        finally:
            self._file.seek(current_pos)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the file if we opened it."""
        if self._should_close_file and self._file is not None:
            self._file.close()
            self._file = None

    def __repr__(self) -> str:
        return f"<LocalStream {self.name}>"


def open_local_stream(source: Union[Path, str, BinaryIO], *, writable: bool = False) -> LocalStream:
    """Create a local physical stream."""
    return LocalStream(source, writable=writable)
