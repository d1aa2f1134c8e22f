# arena.py
# ---------------------------------------------
# Fixed-capacity byte arena with release() support.
# Addresses are byte offsets into the arena (0 .. HEAP_SIZE-1).
# Released blocks are merged with free neighbours; a free block that
# reaches the high water mark is given back to the bump pointer.
# ---------------------------------------------

import numpy as np

from strbuf.runtime.backend import MemoryBackend, Region

HEAP_SIZE = 1 << 20   # 1 MiB

class ArenaBackend(MemoryBackend):
    def __init__(self, capacity: int = HEAP_SIZE):
        if capacity < 0:
            raise ValueError(f"Arena capacity must be non-negative, got {capacity}")
        try:
            self.memory = np.zeros(capacity, dtype=np.uint8)
        except (ValueError, OverflowError) as e:
            raise MemoryError(f"cannot reserve a {capacity}-byte arena: {e}") from e
        self.capacity = capacity
        self.high_water_mark = 0
        self.generation = 0     # bumped by reset(); older regions can no longer be released
        self.live = {}          # addr -> size
        self.free_list = []     # [(addr, size), ...] - released blocks below the high water mark

    def obtain(self, size):
        """
        Carve 'size' contiguous bytes out of the arena.

        Uses first-fit strategy: checks free list first, then bump allocates.
        Zero-byte requests get an empty view and are not tracked.
        """
        if size == 0:
            return Region(data=self.memory[0:0], addr=0, _backend=None)

        for i, (free_addr, free_size) in enumerate(self.free_list):
            if free_size >= size:
                self.free_list.pop(i)
                if free_size > size:
                    self.free_list.append((free_addr + size, free_size - size))
                return self._hand_out(free_addr, size)

        if (self.high_water_mark + size) > self.capacity:
            raise MemoryError(
                f"Out of arena memory: cannot allocate {size} bytes. "
                f"Used: {self.used()}, High water mark: {self.high_water_mark}, "
                f"Free list: {len(self.free_list)} blocks"
            )

        addr = self.high_water_mark
        self.high_water_mark += size
        return self._hand_out(addr, size)

    def _hand_out(self, addr, size):
        self.live[addr] = size
        return Region(
            data=self.memory[addr:addr + size],
            addr=addr,
            _backend=self,
            generation=self.generation,
        )

    def release(self, region):
        """
        Release a live block, making its bytes available for reuse.

        The block is merged with any free block directly before or after
        it. If the merged block ends at the high water mark, the mark moves
        back to its start instead of growing the free list.

        Raises:
            ValueError: if the block is not live (never handed out, already
                released, or handed out before the last reset())
        """
        if (region.generation != self.generation
                or self.live.get(region.addr) != region.size):
            raise ValueError(
                f"Block at addr={region.addr} (size={region.size}) is not live in this arena"
            )
        del self.live[region.addr]

        start, end = region.addr, region.addr + region.size
        kept = []
        for free_addr, free_size in self.free_list:
            if free_addr + free_size == start:
                start = free_addr
            elif free_addr == end:
                end = free_addr + free_size
            else:
                kept.append((free_addr, free_size))

        if end == self.high_water_mark:
            self.high_water_mark = start
        else:
            kept.append((start, end - start))
        self.free_list = kept

    def used(self):
        """Get total bytes currently handed out (excludes released blocks)."""
        return sum(self.live.values())

    def reset(self):
        """Reset arena to initial state. Regions handed out earlier become invalid."""
        self.high_water_mark = 0
        self.generation += 1
        self.live.clear()
        self.free_list.clear()

    def dump(self, file=None):
        """Print the memory map."""
        print("\n==== ARENA MEMORY MAP ====\n", file=file)
        for addr, size in sorted(self.live.items()):
            print(f"addr={addr:8d}, size={size} bytes", file=file)
        print(f"\nAllocated: {self.used()} bytes", file=file)
        print(f"High water mark: {self.high_water_mark} bytes", file=file)
        print(f"Free list: {len(self.free_list)} blocks, {sum(s for _, s in self.free_list)} bytes", file=file)
        print(f"Capacity: {self.capacity} bytes\n", file=file)
