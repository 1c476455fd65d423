"""Physical stream adapters for SubCursor - the streams windows are cut from."""

# Re-export these for import convenience
from .base import PhysicalStream, RangeNotSupportedError
from .local import LocalStream, open_local_stream
from .http_sync import HTTPRangeStream, open_http_stream


def open_stream(source, *, writable: bool = False):
    """Factory function to create the appropriate physical stream for ``source``."""
    if hasattr(source, 'read'):  # BinaryIO
        return open_local_stream(source, writable=writable)

    source_str = str(source)
    if source_str.startswith(('http://', 'https://')):
        if writable:
            raise ValueError(f"HTTP sources are read-only: {source_str}")
        return open_http_stream(source_str)
    else:
        return open_local_stream(source, writable=writable)
