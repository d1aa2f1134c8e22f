# Memory runtime: backends and the checked allocator

from strbuf.runtime.backend import Region, MemoryBackend, SystemBackend
from strbuf.runtime.arena import ArenaBackend, HEAP_SIZE
from strbuf.runtime.allocator import (
    CheckedAllocator, allocate, terminate, set_default_backend,
    OUT_OF_MEMORY_MESSAGE, EXIT_STATUS,
)

__all__ = [
    'Region', 'MemoryBackend', 'SystemBackend',
    'ArenaBackend', 'HEAP_SIZE',
    'CheckedAllocator', 'allocate', 'terminate', 'set_default_backend',
    'OUT_OF_MEMORY_MESSAGE', 'EXIT_STATUS',
]
