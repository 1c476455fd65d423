"""Exclusive access guards shared by every window of one handle."""

from __future__ import annotations

import threading
from typing import Dict, Optional, Protocol, Type, runtime_checkable

from .model import BorrowConflict


@runtime_checkable
class ExclusiveAccessGuard(Protocol):
    """Protocol for the primitive that serializes access to a physical stream."""

    def acquire(self) -> None:
        """Take exclusive access or raise BorrowConflict."""
        ...

    def release(self) -> None:
        ...

    def locked(self) -> bool:
        ...

    def __enter__(self) -> "ExclusiveAccessGuard":
        ...

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        ...


class CooperativeGuard:
    """Single-thread guard: a borrow flag, conflicts fail immediately."""

    mode = "cooperative"

    def __init__(self) -> None:
        self._borrowed = False

    def acquire(self) -> None:
        if self._borrowed:
            raise BorrowConflict("stream is already borrowed")
        self._borrowed = True

    def release(self) -> None:
        if not self._borrowed:
            raise RuntimeError("release of an unborrowed guard")
        self._borrowed = False

    def locked(self) -> bool:
        return self._borrowed

    def __enter__(self) -> "CooperativeGuard":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()


class ThreadSafeGuard:
    """Blocking mutual exclusion across threads.

    Another thread holding the lock makes ``acquire`` wait for it. The owning
    thread asking again is re-entrancy, which raises BorrowConflict instead of
    deadlocking on the non-reentrant lock.
    """

    mode = "threadsafe"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owner: Optional[int] = None

    def acquire(self) -> None:
        me = threading.get_ident()
        if self._owner == me:
            raise BorrowConflict("stream is already borrowed by this thread")
        self._lock.acquire()
        self._owner = me

    def release(self) -> None:
        if self._owner != threading.get_ident():
            raise RuntimeError("release of a guard held by another thread")
        self._owner = None
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()

    def __enter__(self) -> "ThreadSafeGuard":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()


GUARD_MODES: Dict[str, Type] = {
    CooperativeGuard.mode: CooperativeGuard,
    ThreadSafeGuard.mode: ThreadSafeGuard,
}

DEFAULT_GUARD_MODE = ThreadSafeGuard.mode


def make_guard(mode: str | None = None) -> ExclusiveAccessGuard:
    """Create a guard for ``mode`` (DEFAULT_GUARD_MODE when None)."""
    mode = mode or DEFAULT_GUARD_MODE
    try:
        guard_cls = GUARD_MODES[mode]
    except KeyError:
        raise ValueError(f"Unknown guard mode {mode!r}, expected one of {sorted(GUARD_MODES)}") from None
    return guard_cls()
