"""Micro benchmark for window seek/read overhead.

Compares SubCursor against direct access to the underlying BytesIO.
Meant for manual runs, not collected by pytest.
"""

import io
import sys
import timeit
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from subcursor import SharedStreamHandle, SubCursor


def bench(label: str, stmt, number: int = 100_000) -> None:
    seconds = timeit.timeit(stmt, number=number)
    print(f"{label:<32} {seconds / number * 1e9:8.1f} ns/op")


def run(mode: str) -> None:
    data = bytes(range(256)) * 4
    handle = SharedStreamHandle(io.BytesIO(data), mode=mode)
    window = SubCursor.builder(handle).start(20).end(200).preserve(False).build()
    preserving = SubCursor.builder(handle).start(20).end(200).build()
    buffer = bytearray(100)

    print(f"-- guard mode: {mode}")
    bench("seek SEEK_SET", lambda: window.seek(180))
    bench("seek SEEK_CUR + reset", lambda: (window.seek(0), window.seek(180, io.SEEK_CUR)))
    bench("seek SEEK_END", lambda: window.seek(-10, io.SEEK_END))
    bench("readinto 100B", lambda: (window.seek(0), window.readinto(buffer)))
    bench("readinto 100B preserve", lambda: (preserving.seek(0), preserving.readinto(buffer)))
    bench("write 5B", lambda: (window.seek(0), window.write(b"\x00\x01\x02\x03\x04")))

    raw = io.BytesIO(data)
    bench("baseline BytesIO readinto 100B", lambda: (raw.seek(20), raw.readinto(buffer)))


if __name__ == "__main__":
    print("SubCursor micro benchmark")
    print("=" * 40)
    for mode in ("cooperative", "threadsafe"):
        run(mode)
        print()
