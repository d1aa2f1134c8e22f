"""
Memory backends - where raw regions come from.

A backend hands out uninitialized byte regions and takes them back.
It reports exhaustion by raising MemoryError; deciding what exhaustion
means for the program is the checked allocator's job, not the backend's.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
import numpy as np


@dataclass(eq=False)
class Region:
    """Handle to a contiguous block of bytes obtained from a backend.

    Regions compare by identity: two handles are equal only if they are
    the same handle.
    """
    data: np.ndarray
    addr: int = 0
    _backend: Any = None  # Backend that must take the block back
    generation: int = 0   # Backend epoch the block was handed out in

    @property
    def size(self) -> int:
        return len(self.data)

    def release(self) -> None:
        """Return the block to the backend it came from."""
        if self._backend is not None:
            self._backend.release(self)


class MemoryBackend(ABC):
    """
    Abstract source of raw byte regions.

    Implementations (system heap, fixed arena, test fakes) must raise
    MemoryError when a request cannot be satisfied.
    """

    @abstractmethod
    def obtain(self, size: int) -> Region:
        """Obtain an uninitialized region of exactly `size` bytes."""
        pass

    @abstractmethod
    def release(self, region: Region) -> None:
        """Give a region obtained from this backend back."""
        pass


class SystemBackend(MemoryBackend):
    """
    Process heap backend.

    Regions are plain numpy arrays; the garbage collector reclaims them
    once unreachable, so release() has nothing to do.
    """

    def obtain(self, size: int) -> Region:
        try:
            data = np.empty(size, dtype=np.uint8)
        except (ValueError, OverflowError) as e:
            # numpy refuses sizes it can never represent
            raise MemoryError(f"cannot allocate {size} bytes: {e}") from e
        return Region(data=data, addr=0, _backend=self)

    def release(self, region: Region) -> None:
        pass
