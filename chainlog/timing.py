"""
Helpers for since() timing lines.
"""

import threading
from typing import Iterable, TextIO

_write_lock = threading.Lock()


def elapsed_ms(start: int, end: int) -> int:
    """Whole milliseconds between two monotonic nanosecond readings, truncated."""
    return max(0, (end - start) // 1_000_000)


def since_line(modules: Iterable[str], ms: int, label: str) -> str:
    """Format a timing line: module path, right-aligned milliseconds, label."""
    return f"  {':'.join(modules):<16} {ms:>5}ms  {label}\n"


def write_line(stream: TextIO, line: str) -> None:
    """Write a raw line to the debug stream."""
    with _write_lock:
        stream.write(line)
        stream.flush()
