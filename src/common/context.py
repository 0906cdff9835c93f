# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Deadline-carrying run context shared by the orchestrator, testers and drivers.
"""

import time


class DeadlineExceeded(TimeoutError):
    """Raised when an operation is attempted after its context deadline."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class Context:
    """
    Immutable deadline holder.

    A context without a deadline never expires. Derived contexts keep the
    earlier of their own and their parent's deadline.
    """

    def __init__(self, deadline: float | None = None) -> None:
        self._deadline = deadline

    @classmethod
    def background(cls) -> "Context":
        """Return a context that never expires."""
        return cls()

    def with_timeout(self, seconds: float) -> "Context":
        """Derive a context that expires after `seconds` or with its parent."""
        deadline = time.monotonic() + seconds
        if self._deadline is not None:
            deadline = min(deadline, self._deadline)
        return Context(deadline)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None when unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self) -> None:
        """Raise DeadlineExceeded if the deadline has passed."""
        if self.expired():
            raise DeadlineExceeded()

    def bound(self, seconds: float) -> float:
        """Clamp a per-call timeout to the time left in this context."""
        remaining = self.remaining()
        if remaining is None:
            return seconds
        return min(seconds, remaining)
