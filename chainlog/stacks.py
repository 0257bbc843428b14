"""
Stack trace capture, filtering and rendering.

Frames are captured as plain (function, file, line) tuples so they can be
stored on an immutable log entry and rendered later by any formatter.
"""

import os
import re
import sys
import traceback
from dataclasses import dataclass, field
from types import FrameType, TracebackType
from typing import Iterable, NamedTuple, Optional

from .errors import RecoveredPanic

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


class Frame(NamedTuple):
    """One stack frame."""
    function: str
    file: str
    line: int


def _is_internal(filename: str) -> bool:
    return os.path.dirname(os.path.abspath(filename)) == _PACKAGE_DIR


def _convert(summary: traceback.StackSummary) -> tuple[Frame, ...]:
    return tuple(Frame(fs.name, fs.filename, fs.lineno or 0) for fs in summary)


def from_traceback(tb: Optional[TracebackType]) -> tuple[Frame, ...]:
    """Frames of a traceback, oldest first, without chainlog's own frames."""
    if tb is None:
        return ()
    frames = _convert(traceback.extract_tb(tb))
    return tuple(f for f in frames if not _is_internal(f.file))


def capture(start: Optional[FrameType] = None) -> tuple[Frame, ...]:
    """
    Capture the current call stack, oldest first.

    Frames belonging to chainlog itself are dropped, so the innermost frame is
    the code that made the logging call.
    """
    if start is None:
        start = sys._getframe(1)
    frames = _convert(traceback.extract_stack(start))
    return tuple(f for f in frames if not _is_internal(f.file))


def for_error(err: Optional[BaseException]) -> tuple[Frame, ...]:
    """
    Frames for an error: its own traceback when it was raised, otherwise the
    current call site.
    """
    if isinstance(err, RecoveredPanic) and err.frames:
        return tuple(err.frames)
    if err is not None and err.__traceback__ is not None:
        return from_traceback(err.__traceback__)
    return capture(sys._getframe(1))


@dataclass
class StackFilter:
    """
    Include/exclude patterns for stack frames.

    Patterns are regular expressions searched in "function file" for each
    frame. With include patterns set, only matching frames are kept; exclude
    patterns then drop frames. Useful to hide middleware and framework frames.
    """
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)

    def __post_init__(self):
        self._include = [re.compile(p) for p in self.include]
        self._exclude = [re.compile(p) for p in self.exclude]

    def _matches(self, patterns: list, frame: Frame) -> bool:
        text = f"{frame.function} {frame.file}"
        return any(p.search(text) for p in patterns)

    def apply(self, frames: Iterable[Frame]) -> tuple[Frame, ...]:
        """Return the frames that pass the filter, order preserved."""
        kept = []
        for frame in frames:
            if self._include and not self._matches(self._include, frame):
                continue
            if self._exclude and self._matches(self._exclude, frame):
                continue
            kept.append(frame)
        return tuple(kept)


def render(frames: Iterable[Frame]) -> str:
    """Render frames as indented `function` / `file:line` pairs."""
    return "".join(f"\n\t{f.function}\n\t\t{f.file}:{f.line}" for f in frames)
