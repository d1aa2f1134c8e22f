"""
Checked allocator - obtain a region or end the process.

Allocation failure is not an error this program recovers from. When the
backend cannot satisfy a request, the allocator prints "out of memory" to
stderr and exits the process with status 1. The exit goes through
os._exit(), so no caller can catch it.

The backend and the exhaustion handler are replaceable so tests can inject
faults. Whatever the handler does, a failed request never returns a region.

Example:
    from strbuf.runtime.allocator import CheckedAllocator
    from strbuf.runtime.arena import ArenaBackend

    alloc = CheckedAllocator(ArenaBackend(64))
    region = alloc.allocate(16)
"""

import os
import sys
from typing import Callable, Optional

from strbuf.runtime.backend import MemoryBackend, Region, SystemBackend

OUT_OF_MEMORY_MESSAGE = "out of memory\n"
EXIT_STATUS = 1


def terminate(message: str = OUT_OF_MEMORY_MESSAGE, status: int = EXIT_STATUS):
    """Write `message` to stderr and exit immediately. Never returns."""
    try:
        sys.stdout.flush()
        sys.stderr.write(message)
        sys.stderr.flush()
    finally:
        os._exit(status)


class CheckedAllocator:
    """
    Allocation primitive with a fail-fast exhaustion policy.

    Args:
        backend: Source of raw regions (defaults to the process heap)
        on_exhausted: Called with the backend's MemoryError when a request
            cannot be satisfied. Expected not to return; if it does,
            terminate() runs anyway.
    """

    def __init__(
        self,
        backend: Optional[MemoryBackend] = None,
        on_exhausted: Optional[Callable[[MemoryError], None]] = None,
    ):
        self.backend = backend or SystemBackend()
        self.on_exhausted = on_exhausted

    def allocate(self, size: int) -> Region:
        """
        Obtain an uninitialized region of `size` bytes.

        Args:
            size: Number of bytes, >= 0. Zero yields a valid empty region.

        Returns:
            Region exclusively owned by the caller
        """
        if isinstance(size, bool) or not isinstance(size, int):
            raise TypeError(f"Allocation size must be int, got {type(size).__name__}")
        if size < 0:
            raise ValueError(f"Allocation size must be non-negative, got {size}")

        try:
            return self.backend.obtain(size)
        except MemoryError as exc:
            if self.on_exhausted is not None:
                self.on_exhausted(exc)
            terminate()


default_allocator = CheckedAllocator()


def allocate(size: int) -> Region:
    """Allocate `size` bytes from the default allocator (fatal on exhaustion)."""
    return default_allocator.allocate(size)


def set_default_backend(backend: MemoryBackend) -> MemoryBackend:
    """Swap the default allocator's backend. Returns the previous one."""
    previous = default_allocator.backend
    default_allocator.backend = backend
    return previous
