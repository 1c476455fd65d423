"""Tests for I/O factory functions and the open_window facade."""

import pytest
import tempfile
import io
import gc
import warnings
from pathlib import Path

from subcursor import open_window, SubCursor, InvalidRange
from subcursor.io import open_stream
from subcursor.io.local import LocalStream
from subcursor.io.http_sync import HTTPRangeStream


class TestFactoryFunctions:
    """Test the main factory functions."""

    def test_open_stream_with_path_string(self):
        """Test factory with path string."""
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"0123456789")
            f.flush()

            with open_stream(f.name) as stream:
                assert isinstance(stream, LocalStream)
                assert stream.size == 10

    def test_open_stream_with_path_object(self):
        """Test factory with Path object."""
        with tempfile.NamedTemporaryFile(delete=False) as f:
            f.write(b"0123456789")
            temp_path = Path(f.name)

        try:
            with open_stream(temp_path, writable=True) as stream:
                assert isinstance(stream, LocalStream)
                assert stream.writable()
        finally:
            temp_path.unlink()

    def test_open_stream_with_binary_io(self):
        """Test factory with BinaryIO object."""
        stream = open_stream(io.BytesIO(b"0123456789"))
        assert isinstance(stream, LocalStream)

    def test_open_stream_with_http_url(self, httpserver):
        """Test factory with HTTP URL."""
        httpserver.expect_request("/blob").respond_with_data(b"0123456789")
        stream = open_stream(httpserver.url_for("/blob"))
        assert isinstance(stream, HTTPRangeStream)
        assert stream.content_length == 10

    def test_open_stream_writable_url(self):
        """Test that URLs cannot be opened for writing."""
        with pytest.raises(ValueError, match="read-only"):
            open_stream("https://example.com/blob.bin", writable=True)


class TestOpenWindow:
    """Test the one-call facade."""

    def test_bounded(self):
        window = open_window(io.BytesIO(b"file1,file2,file3\n"), 6, 11)
        assert isinstance(window, SubCursor)
        assert window.read() == b"file2"
        assert window.handle.mode == "threadsafe"

    def test_open_ended_cooperative(self):
        window = open_window(io.BytesIO(b"file1,file2,file3\n"), 12, mode="cooperative", preserve=False)
        assert window.handle.mode == "cooperative"
        assert not window.preserve
        assert window.read() == b"file3\n"

    def test_writable(self):
        bio = io.BytesIO(bytes(8))
        window = open_window(bio, 2, 4, writable=True)
        assert window.write(b"abc") == 2
        assert bio.getvalue() == b"\x00\x00ab\x00\x00\x00\x00"

    def test_invalid_range(self):
        with pytest.raises(InvalidRange):
            open_window(io.BytesIO(b"abc"), 3, 1)

    def test_url(self, httpserver):
        httpserver.expect_request("/blob").respond_with_data(b"0123456789")
        window = open_window(httpserver.url_for("/blob"), 4, 7)
        assert window.read() == b"456"

    def test_handle_closes_opened_file(self, tmp_path):
        path = tmp_path / "blob.bin"
        path.write_bytes(b"file1,file2,file3\n")

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            window = open_window(str(path), 2, 5)
            assert window.read() == b"le1"
            assert window.handle.owns_stream
            window.close()
            window.handle.close()
            del window
            gc.collect()

        assert not [w for w in caught if issubclass(w.category, ResourceWarning)]

    def test_dropped_window_releases_opened_file(self, tmp_path):
        path = tmp_path / "blob.bin"
        path.write_bytes(b"file1,file2,file3\n")

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            window = open_window(str(path), 12)
            assert window.read() == b"file3\n"
            del window
            gc.collect()

        assert not [w for w in caught if issubclass(w.category, ResourceWarning)]

    def test_caller_stream_stays_open(self):
        bio = io.BytesIO(b"0123456789")
        window = open_window(bio, 0, 2)
        window.handle.close()
        assert not bio.closed
        assert bio.getvalue() == b"0123456789"
