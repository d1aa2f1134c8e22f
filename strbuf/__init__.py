# strbuf
# Length-tagged byte strings with a fail-fast checked allocator

from strbuf.buffer import Buffer, BorrowedBuffer, OwnedBuffer, borrow
from strbuf.ops import concatenate, equals, from_char
from strbuf.runtime.allocator import CheckedAllocator, allocate

__all__ = [
    'Buffer', 'BorrowedBuffer', 'OwnedBuffer', 'borrow',
    'concatenate', 'equals', 'from_char',
    'CheckedAllocator', 'allocate',
]
