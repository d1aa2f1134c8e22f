"""
End-to-end tests: run the demo driver and the fatal exhaustion path
in a child process and check exit status and streams.
"""

import sys
from pathlib import Path
import subprocess
import textwrap
import unittest

ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(ROOT))

from strbuf.cli import join_parts
from strbuf.runtime.allocator import CheckedAllocator, set_default_backend
from strbuf.runtime.arena import ArenaBackend


def run_python(*args):
    return subprocess.run(
        [sys.executable, *args],
        cwd=ROOT,
        capture_output=True,
        timeout=60,
    )


def run_cli(*args):
    return run_python("-m", "strbuf.cli", *args)


class TestDriver(unittest.TestCase):
    def test_default_demo(self):
        proc = run_cli()
        self.assertEqual(proc.returncode, 0, proc.stderr)
        self.assertEqual(proc.stdout, b"Hello world!!!\n")
        self.assertEqual(proc.stderr, b"")

    def test_custom_parts(self):
        proc = run_cli("foo", "", "bar", "baz")
        self.assertEqual(proc.returncode, 0, proc.stderr)
        self.assertEqual(proc.stdout, b"foobarbaz\n")

    def test_fits_arena_exactly(self):
        proc = run_cli("--heap-size", "14")
        self.assertEqual(proc.returncode, 0, proc.stderr)
        self.assertEqual(proc.stdout, b"Hello world!!!\n")

    def test_arena_too_small_is_fatal(self):
        proc = run_cli("--heap-size", "13")
        self.assertEqual(proc.returncode, 1)
        self.assertEqual(proc.stdout, b"")
        self.assertEqual(proc.stderr, b"out of memory\n")

    def test_dump_heap(self):
        proc = run_cli("--heap-size", "64", "--dump-heap", "ab", "cd", "ef")
        self.assertEqual(proc.returncode, 0, proc.stderr)
        self.assertEqual(proc.stdout, b"abcdef\n")
        self.assertIn(b"ARENA MEMORY MAP", proc.stderr)
        self.assertIn(b"Allocated: 0 bytes", proc.stderr)

    def test_unreservable_heap_size_is_fatal(self):
        proc = run_cli("--heap-size", str(1 << 70))
        self.assertEqual(proc.returncode, 1)
        self.assertEqual(proc.stdout, b"")
        self.assertEqual(proc.stderr, b"out of memory\n")

    def test_arena_empty_after_run(self):
        proc = run_cli("--heap-size", "20", "--dump-heap", "abcde", "fghij", "")
        self.assertEqual(proc.returncode, 0, proc.stderr)
        self.assertEqual(proc.stdout, b"abcdefghij\n")
        self.assertIn(b"High water mark: 0 bytes", proc.stderr)
        self.assertIn(b"Free list: 0 blocks", proc.stderr)

    def test_negative_heap_size(self):
        proc = run_cli("--heap-size", "-1")
        self.assertEqual(proc.returncode, 2)


class TestFatalExhaustion(unittest.TestCase):
    def test_injected_failure_terminates_process(self):
        script = textwrap.dedent("""
            from strbuf.buffer import borrow
            from strbuf.ops import concatenate
            from strbuf.runtime.allocator import CheckedAllocator
            from strbuf.runtime.backend import MemoryBackend

            class FailingBackend(MemoryBackend):
                def obtain(self, size):
                    raise MemoryError("injected")
                def release(self, region):
                    pass

            print("before", flush=True)
            try:
                z = concatenate(borrow(b"Hello "), borrow(b"world!!!"),
                                allocator=CheckedAllocator(FailingBackend()))
                print("returned", z)
            except BaseException:
                print("caught")
            print("after")
        """)
        proc = run_python("-c", script)
        self.assertEqual(proc.returncode, 1)
        self.assertEqual(proc.stdout, b"before\n")
        self.assertEqual(proc.stderr, b"out of memory\n")

    def test_default_allocator_terminates_process(self):
        script = textwrap.dedent("""
            from strbuf.runtime.allocator import allocate
            allocate(1 << 70)
            print("unreachable")
        """)
        proc = run_python("-c", script)
        self.assertEqual(proc.returncode, 1)
        self.assertEqual(proc.stdout, b"")
        self.assertIn(b"out of memory", proc.stderr)


class TestJoinParts(unittest.TestCase):
    def test_intermediates_released(self):
        arena = ArenaBackend(64)
        previous = set_default_backend(arena)
        try:
            result = join_parts([b"Hello ", b"world", b"!!!"])
            self.assertEqual(result.tobytes(), b"Hello world!!!")
            self.assertEqual(arena.used(), 14)
            result.release()
            self.assertEqual(arena.used(), 0)
        finally:
            set_default_backend(previous)

    def test_no_parts(self):
        result = join_parts([])
        self.assertEqual(result.length, 0)


if __name__ == "__main__":
    unittest.main()
