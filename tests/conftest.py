"""
Root-level shared fixtures for all chainlog tests.

Every test gets a fresh process config whose only output writes into an
in-memory buffer, and a frozen wall clock so timestamps are predictable.
"""

import io
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Generator

import pytest

from chainlog import LogConfig, StreamOutput, clock, context

FROZEN = datetime(2024, 1, 2, 15, 4, 5)

# FROZEN formatted with the default fmt_time
T = "15:04:05 "


class FakeMonotonic:
    """Controllable monotonic clock in nanoseconds."""

    def __init__(self):
        self.ns = 10_000_000_000

    def __call__(self) -> int:
        return self.ns

    def advance(self, ms: int) -> None:
        self.ns += ms * 1_000_000


class Captured:
    """Config under test plus the buffers it writes to."""

    def __init__(self):
        self.buf = io.StringIO()
        self.debug_buf = io.StringIO()
        self.config = LogConfig(
            outputs=[StreamOutput(self.buf)],
            stack_trace=False,
            debug_stream=self.debug_buf,
        )

    @property
    def out(self) -> str:
        return self.buf.getvalue()

    @property
    def debug_out(self) -> str:
        return self.debug_buf.getvalue()

    def reset(self) -> None:
        self.buf.seek(0)
        self.buf.truncate()
        self.debug_buf.seek(0)
        self.debug_buf.truncate()


@pytest.fixture(autouse=True)
def frozen_now(monkeypatch) -> datetime:
    """Freeze the wall clock used for timestamps."""
    monkeypatch.setattr(clock, "now", lambda: FROZEN)
    return FROZEN


@pytest.fixture
def fake_monotonic(monkeypatch) -> FakeMonotonic:
    """Replace the monotonic clock used by since()."""
    fake = FakeMonotonic()
    monkeypatch.setattr(clock, "monotonic", fake)
    return fake


@pytest.fixture(autouse=True)
def captured(monkeypatch) -> Generator[Captured, None, None]:
    """
    Install an isolated process config for the test.

    The previous default is restored afterwards.
    """
    monkeypatch.delenv("CHAINLOG_DEBUG", raising=False)
    monkeypatch.delenv("CHAINLOG_FORMAT", raising=False)
    monkeypatch.delenv("CHAINLOG_COLORS", raising=False)

    cap = Captured()
    saved = context._default
    context.configure(cap.config)
    yield cap
    context._default = saved


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test data.

    Automatically cleaned up after test completion.
    """
    temp_path = Path(tempfile.mkdtemp(prefix="chainlog_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)
