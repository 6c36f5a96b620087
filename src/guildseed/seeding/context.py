"""
Cancellable run context threaded through every seeding call.

Usage:
    ctx = RunContext(timeout=30)
    seeder.seed(ctx)

    # From another thread
    ctx.cancel()
"""

import threading
import time

from .errors import SeedCancelledError


class RunContext:
    """Cancellation flag plus an optional deadline on the monotonic clock."""

    def __init__(self, timeout: float | None = None):
        self._cancelled = threading.Event()
        self.deadline: float | None = None
        if timeout is not None:
            self.deadline = time.monotonic() + timeout

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def check(self) -> None:
        """Raise SeedCancelledError if cancelled or past the deadline."""
        if self.cancelled:
            raise SeedCancelledError("seeding cancelled")
        if self.expired:
            raise SeedCancelledError("seeding deadline exceeded")
