"""
CPU and heap profiling helpers.

    def main():
        stop = chainlog.profile_cpu(args.cpu_profile)
        try:
            ... work ...
        finally:
            stop()
            chainlog.profile_heap(args.heap_profile)

Both do nothing for an empty path, so they can be wired straight to optional
command-line flags.
"""

import cProfile
import tracemalloc
from pathlib import Path
from typing import Callable, Union


def profile_cpu(path: Union[str, Path]) -> Callable[[], None]:
    """
    Start CPU profiling.

    Returns:
        A function that stops profiling and writes pstats data to path
    """
    if not path:
        return lambda: None

    path = Path(path)
    # Fail now rather than after a long run
    path.touch()

    profiler = cProfile.Profile()
    profiler.enable()

    def stop() -> None:
        profiler.disable()
        profiler.dump_stats(str(path))

    return stop


def profile_heap(path: Union[str, Path]) -> None:
    """
    Write a tracemalloc snapshot to path.

    Only allocations traced since tracemalloc.start() show up, so call it (or
    set PYTHONTRACEMALLOC) early for a useful snapshot. If tracing is off, it
    is started for the snapshot and stopped again.
    """
    if not path:
        return

    started = not tracemalloc.is_tracing()
    if started:
        tracemalloc.start()
    try:
        tracemalloc.take_snapshot().dump(str(path))
    finally:
        if started:
            tracemalloc.stop()
