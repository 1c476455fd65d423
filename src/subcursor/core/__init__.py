"""Core window layer: guards, the shared handle and the window cursor."""

from .model import SubCursorError, InvalidRange, OutOfBounds, BorrowConflict, OpenEndedWindowWarning
from .guard import ExclusiveAccessGuard, CooperativeGuard, ThreadSafeGuard, make_guard
from .handle import SharedStreamHandle
from .cursor import SubCursor, SubCursorBuilder, windows_from_entries
