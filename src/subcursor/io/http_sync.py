"""Read-only HTTP physical stream using requests Range requests."""

import io
import warnings
from typing import Optional

import requests

from .base import RangeNotSupportedError, RANGE_FALLBACK_MAX


HEAD_TIMEOUT = 30
GET_TIMEOUT = 60

# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


def _decide_full_get(content_length: Optional[int], accept_ranges: bool) -> bool:
    """Return True only when not accept_ranges and content_length and content_length < RANGE_FALLBACK_MAX."""
    return (not accept_ranges and
            content_length is not None and
            content_length < RANGE_FALLBACK_MAX)


class HTTPRangeStream:
    """Seekable, read-only physical stream backed by HTTP Range requests."""

    def __init__(self, url: str):
        self.url = url
        self.name = url
        self.bytes_fetched = 0
        self.requests_made = 0
        self.content_length: Optional[int] = None
        self._accept_ranges = False
        self._full_content: Optional[bytes] = None
        self._offset = 0
        self._session = _get_session()

        # Perform HEAD request immediately
        self._perform_head()

    def _perform_head(self):
        """Perform HEAD request to check capabilities."""
        try:
            self.requests_made += 1
            response = self._session.head(self.url, timeout=HEAD_TIMEOUT)
            if response.status_code >= 400:
                raise IOError(f"HEAD request failed with status {response.status_code}")

            content_length_header = response.headers.get('content-length')
            if content_length_header:
                self.content_length = int(content_length_header)

            accept_ranges = response.headers.get('accept-ranges', '').lower()
            self._accept_ranges = accept_ranges == 'bytes'

        except requests.RequestException as e:
            raise IOError(f"HEAD request failed: {e}")

    def _fetch_full_content(self):
        """Download entire file content for small files without range support."""
        if self._full_content is not None:
            return

        try:
            self.requests_made += 1
            response = self._session.get(self.url, timeout=GET_TIMEOUT)
            if response.status_code >= 400:
                raise IOError(f"GET request failed with status {response.status_code}")

            self._full_content = response.content
            self.content_length = len(self._full_content)
            self.bytes_fetched = len(self._full_content)

        except requests.RequestException as e:
            raise IOError(f"GET request failed: {e}")

    def _fetch_range(self, start: int, length: int, retry_count: int = 0) -> bytes:
        """Fetch up to ``length`` bytes at ``start``; fewer only at end of resource."""
        end = start + length - 1
        headers = {'Range': f'bytes={start}-{end}'}

        try:
            self.requests_made += 1
            response = self._session.get(self.url, headers=headers, timeout=HEAD_TIMEOUT)

            if response.status_code == 200:
                # Server ignored the Range header and sent everything
                if self.content_length and self.content_length >= RANGE_FALLBACK_MAX:
                    raise RangeNotSupportedError("Server doesn't support ranges and file is too large")

                self._full_content = response.content
                self.content_length = len(self._full_content)
                self.bytes_fetched = len(self._full_content)
                return self._full_content[start:start + length]

            elif response.status_code == 206:
                data = response.content

                # Server might return less than requested - handle this
                if len(data) < length and retry_count == 0:
                    remaining = length - len(data)
                    data += self._fetch_range(start + len(data), remaining, retry_count + 1)
                    if len(data) < length:
                        warnings.warn(f"Short range response from {self.url}. Expected {length}, got {len(data)}")

                self.bytes_fetched += len(response.content)
                return data

            elif response.status_code == 416:
                # Range starts at or past the end of the resource
                return b''

            else:
                raise IOError(f"Range request failed with status {response.status_code}")

        except requests.RequestException as e:
            if retry_count == 0:
                # One automatic retry
                return self._fetch_range(start, length, retry_count + 1)
            raise IOError(f"Range request failed: {e}")

    def _read(self, start: int, length: int) -> bytes:
        if self._full_content is not None:
            return self._full_content[start:start + length]

        if _decide_full_get(self.content_length, self._accept_ranges):
            self._fetch_full_content()
            return self._full_content[start:start + length]

        if not self._accept_ranges:
            raise RangeNotSupportedError("Server doesn't support ranges and file is too large")

        return self._fetch_range(start, length)

    def _size(self) -> int:
        if self.content_length is None:
            raise io.UnsupportedOperation(f"Server did not report a Content-Length for {self.url}")
        return self.content_length

    # --------------------------- stream API ----------------------------- #
    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._offset + offset
        elif whence == io.SEEK_END:
            target = self._size() + offset
        else:
            raise ValueError(f"Invalid whence value: {whence}")
        if target < 0:
            raise IOError(f"Negative seek position {target}")
        self._offset = target
        return target

    def tell(self) -> int:
        return self._offset

    def readinto(self, buffer) -> int:
        view = memoryview(buffer).cast('B')
        length = len(view)
        if self.content_length is not None:
            length = min(length, max(self.content_length - self._offset, 0))
        if length <= 0:
            return 0

        data = self._read(self._offset, length)
        count = len(data)
        view[:count] = data
        self._offset += count
        return count

    def write(self, buffer) -> int:
        raise io.UnsupportedOperation("HTTP streams are read-only")

    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return False

    def seekable(self) -> bool:
        return True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        # Session is shared, don't close it here
        self._full_content = None


def open_http_stream(url: str) -> HTTPRangeStream:
    """Create a read-only HTTP physical stream."""
    return HTTPRangeStream(url)
