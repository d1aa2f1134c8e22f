"""
Operations on length-tagged buffers.

Every operation that produces bytes allocates exactly once through the
checked allocator and returns a new OwnedBuffer. Inputs are never modified.
"""

from typing import Optional
import numpy as np

from strbuf.buffer import Buffer, OwnedBuffer
from strbuf.runtime import allocator as _allocator
from strbuf.runtime.allocator import CheckedAllocator


def _resolve(allocator: Optional[CheckedAllocator]) -> CheckedAllocator:
    return allocator if allocator is not None else _allocator.default_allocator


def _check_buffer(name: str, value) -> None:
    if not isinstance(value, Buffer):
        raise TypeError(f"{name} must be a Buffer, got {type(value).__name__}")


def concatenate(a: Buffer, b: Buffer, allocator: Optional[CheckedAllocator] = None) -> OwnedBuffer:
    """
    Return a new owned buffer holding a's bytes followed by b's bytes.

    Allocates exactly a.length + b.length bytes. Exhaustion ends the
    process (see strbuf.runtime.allocator); there is no error return.

    Args:
        a: Leading bytes
        b: Trailing bytes
        allocator: Checked allocator to use (defaults to the module default)

    Returns:
        OwnedBuffer with length a.length + b.length
    """
    _check_buffer("a", a)
    _check_buffer("b", b)
    # Read both inputs before allocating so a released input fails cleanly
    src_a = a.view()
    src_b = b.view()

    total = a.length + b.length
    region = _resolve(allocator).allocate(total)
    region.data[:a.length] = src_a
    region.data[a.length:total] = src_b
    return OwnedBuffer(region, total)


def equals(a: Buffer, b: Buffer) -> bool:
    """True if both buffers hold the same number of bytes with identical content."""
    _check_buffer("a", a)
    _check_buffer("b", b)
    if a.length != b.length:
        return False
    return bool(np.array_equal(a.view(), b.view()))


def from_char(ch: int, allocator: Optional[CheckedAllocator] = None) -> OwnedBuffer:
    """Return a new one-byte owned buffer holding byte value `ch` (0..255)."""
    if isinstance(ch, bool) or not isinstance(ch, int):
        raise TypeError(f"Byte value must be int, got {type(ch).__name__}")
    if not (0 <= ch <= 0xFF):
        raise ValueError(f"Byte value {ch} out of range (0..255)")
    region = _resolve(allocator).allocate(1)
    region.data[0] = ch
    return OwnedBuffer(region, 1)
