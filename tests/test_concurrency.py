"""Randomized multi-thread interleavings against a single-threaded reference."""

import io
import random
import threading

import pytest

from subcursor import SharedStreamHandle, SubCursor

WINDOW = 64
OPS_PER_THREAD = 400


def make_ops(seed: int) -> list:
    rng = random.Random(seed)
    ops = []
    for _ in range(OPS_PER_THREAD):
        kind = rng.choice(("read", "write", "seek"))
        if kind == "read":
            ops.append(("read", rng.randint(0, 24)))
        elif kind == "write":
            ops.append(("write", bytes(rng.randrange(256) for _ in range(rng.randint(0, 24)))))
        else:
            ops.append(("seek", rng.randint(0, WINDOW)))
    return ops


def apply_ops(window: SubCursor, ops: list) -> list:
    """Run ``ops`` on ``window`` and return the observed trace."""
    trace = []
    for kind, arg in ops:
        if kind == "read":
            trace.append(window.read(arg))
        elif kind == "write":
            trace.append(window.write(arg))
        else:
            trace.append(window.seek(arg))
    return trace


def run_reference(initial: bytes, op_lists: list) -> tuple:
    raw = io.BytesIO(initial)
    handle = SharedStreamHandle(raw, mode="cooperative")
    traces = []
    for index, ops in enumerate(op_lists):
        window = SubCursor(handle, index * WINDOW, (index + 1) * WINDOW)
        traces.append(apply_ops(window, ops))
    return raw.getvalue(), traces


class TestThreadSafeInterleavings:
    """Disjoint windows on one thread-safe handle behave like a serial run."""

    @pytest.mark.parametrize("seed", [1, 7, 42, 1234])
    @pytest.mark.parametrize("preserve", [True, False])
    def test_matches_reference(self, seed, preserve):
        threads_count = 2
        initial = bytes(random.Random(seed).randrange(256) for _ in range(WINDOW * threads_count))
        op_lists = [make_ops(seed * 10 + index) for index in range(threads_count)]
        expected_bytes, expected_traces = run_reference(initial, op_lists)

        raw = io.BytesIO(initial)
        handle = SharedStreamHandle(raw, mode="threadsafe")
        windows = [
            SubCursor.builder(handle).start(i * WINDOW).end((i + 1) * WINDOW).preserve(preserve).build()
            for i in range(threads_count)
        ]
        traces = [None] * threads_count
        errors = []
        barrier = threading.Barrier(threads_count)

        def worker(index):
            try:
                barrier.wait()
                traces[index] = apply_ops(windows[index], op_lists[index])
            except Exception as e:  # surfaced through ``errors`` below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(threads_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        assert traces == expected_traces
        assert raw.getvalue() == expected_bytes
