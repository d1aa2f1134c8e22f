#!/usr/bin/env python3
"""Demo driver: concatenate the given parts and print the result."""

import sys
import os
import argparse
from typing import List

from strbuf.buffer import borrow
from strbuf.ops import concatenate
from strbuf.runtime.allocator import set_default_backend, terminate
from strbuf.runtime.arena import ArenaBackend

DEFAULT_PARTS = ["Hello ", "world!!!"]


def join_parts(parts: List[bytes]):
    """Concatenate parts left to right, releasing each intermediate result."""
    buffers = [borrow(p) for p in parts]
    while len(buffers) < 2:
        buffers.append(borrow(b""))

    result = concatenate(buffers[0], buffers[1])
    for buf in buffers[2:]:
        joined = concatenate(result, buf)
        result.release()
        result = joined
    return result


def main(argv=None):
    parser = argparse.ArgumentParser(description="Concatenate length-tagged byte strings")
    parser.add_argument("parts", nargs="*", default=DEFAULT_PARTS,
                        help="Strings to concatenate (default: 'Hello ' 'world!!!')")
    parser.add_argument("--heap-size", type=int, default=None,
                        help="Allocate from a fixed arena of this many bytes instead of the process heap")
    parser.add_argument("--dump-heap", action="store_true",
                        help="Print the arena memory map to stderr when done")
    args = parser.parse_args(argv)

    arena = None
    if args.heap_size is not None:
        if args.heap_size < 0:
            parser.error("--heap-size must be non-negative")
        try:
            arena = ArenaBackend(args.heap_size)
        except MemoryError:
            terminate()
        set_default_backend(arena)

    with join_parts([os.fsencode(p) for p in args.parts]) as result:
        out = sys.stdout.buffer
        out.write(result.tobytes())
        out.write(b"\n")
        out.flush()

    if args.dump_heap and arena is not None:
        arena.dump(file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
