"""
Length-tagged byte buffers.

A Buffer is a `length` plus a numpy uint8 array holding at least that many
bytes. Ownership is carried by the type:

- BorrowedBuffer wraps bytes the caller already has (literals, arrays).
  It never owns them and has no way to release them.
- OwnedBuffer wraps a region handed out by the checked allocator. It is
  the only kind that can be released, and only once.

Both kinds are read-only once constructed.

Example:
    from strbuf.buffer import borrow
    from strbuf.ops import concatenate

    x = borrow(b"Hello ")
    y = borrow(b"world!!!")
    with concatenate(x, y) as z:
        print(z.tobytes())
"""

from __future__ import annotations
from typing import Optional, Union
import numpy as np

from strbuf.runtime.backend import Region

BytesLike = Union[bytes, bytearray, memoryview, np.ndarray]


class Buffer:
    """Read-only view over the first `length` bytes of `data`."""

    __hash__ = None

    def __init__(self, data: np.ndarray, length: int):
        if not (0 <= length <= len(data)):
            raise ValueError(f"Buffer length {length} out of range (0..{len(data)})")
        self._data = data
        self._length = length

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def length(self) -> int:
        return self._length

    def view(self) -> np.ndarray:
        """Read-only numpy view of exactly `length` bytes."""
        valid = self.data[:self._length]
        valid.flags.writeable = False
        return valid

    def tobytes(self) -> bytes:
        return self.view().tobytes()

    def __len__(self) -> int:
        return self.length

    def __bytes__(self) -> bytes:
        return self.tobytes()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Buffer):
            return NotImplemented
        from strbuf.ops import equals
        return equals(self, other)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.tobytes()!r}, length={self.length})"


class BorrowedBuffer(Buffer):
    """Buffer over caller-owned bytes. Never released through the allocator."""


class OwnedBuffer(Buffer):
    """
    Buffer that exclusively owns an allocated region.

    Capacity equals length. The owner calls release() exactly once when
    done (or uses the buffer as a context manager); afterwards the buffer
    must not be read.
    """

    def __init__(self, region: Region, length: int):
        if region.size != length:
            raise ValueError(
                f"Owned buffer must fill its region exactly: size={region.size}, length={length}"
            )
        data = region.data.view()
        data.flags.writeable = False
        super().__init__(data, length)
        self._region: Optional[Region] = region

    @property
    def released(self) -> bool:
        return self._region is None

    @property
    def data(self) -> np.ndarray:
        if self._region is None:
            raise ValueError("Buffer used after release")
        return self._data

    def release(self) -> None:
        """Give the region back to its backend. Raises ValueError on a second call."""
        if self._region is None:
            raise ValueError("Buffer already released")
        region, self._region = self._region, None
        self._data = None
        region.release()

    def __enter__(self) -> OwnedBuffer:
        return self

    def __exit__(self, *exc_info) -> None:
        if not self.released:
            self.release()

    def __repr__(self) -> str:
        if self.released:
            return f"OwnedBuffer(<released>, length={self.length})"
        return super().__repr__()


def borrow(source: BytesLike, length: Optional[int] = None) -> BorrowedBuffer:
    """
    Wrap existing bytes in a BorrowedBuffer without copying.

    Args:
        source: bytes, bytearray, memoryview or 1-D uint8 numpy array
        length: Number of valid bytes (defaults to all of them)
    """
    if isinstance(source, str):
        raise TypeError("borrow() takes bytes, not str; encode the text first")
    if isinstance(source, np.ndarray):
        if source.dtype != np.uint8 or source.ndim != 1:
            raise TypeError(f"Expected 1-D uint8 array, got {source.dtype} with ndim={source.ndim}")
        data = source.view()
    elif isinstance(source, (bytes, bytearray, memoryview)):
        data = np.frombuffer(source, dtype=np.uint8)
    else:
        raise TypeError(f"Cannot borrow from {type(source).__name__}")

    data.flags.writeable = False
    if length is None:
        length = len(data)
    return BorrowedBuffer(data, length)
