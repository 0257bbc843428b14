"""
Outputs (sinks) for log entries.

An output is any callable taking a Log. Outputs that write to a shared
destination must serialize their writes; the ones here do so with a lock.
"""

import logging
import sys
import threading
from typing import Optional, TextIO, Union

from .context import get_config
from .entry import Level, Log

_std_lock = threading.Lock()

# stdlib logging levels for LoggingOutput
STDLIB_LEVELS = {
    Level.INFO: logging.INFO,
    Level.ERROR: logging.ERROR,
    Level.DEBUG: logging.DEBUG,
    Level.TRACE: logging.DEBUG,
}


def output_std(entry: Log) -> None:
    """
    Default output: errors to stderr, everything else to stdout.

    Streams are looked up on every call, so redirected sys.stdout/sys.stderr
    are honored.
    """
    text = get_config().format(entry)
    out = sys.stderr if entry.level == Level.ERROR else sys.stdout
    with _std_lock:
        out.write(text + "\n")
        out.flush()


class StreamOutput:
    """
    Output writing formatted entries to a text stream.

    Safe to share between threads:

        buf = io.StringIO()
        config.outputs.append(StreamOutput(buf))
    """

    def __init__(self, stream: TextIO, newline: bool = False):
        """
        Args:
            stream: Destination stream
            newline: Terminate every entry with a newline
        """
        self.stream = stream
        self.newline = newline
        self._lock = threading.Lock()

    def __call__(self, entry: Log) -> None:
        text = get_config().format(entry)
        if self.newline:
            text += "\n"
        with self._lock:
            self.stream.write(text)

    def __repr__(self) -> str:
        return f"StreamOutput({self.stream!r})"


class LoggingOutput:
    """
    Output forwarding entries to a stdlib logging.Logger.

    The record message is the formatted entry; the entry itself is available
    to handlers and filters as `record.chainlog_entry`.
    """

    def __init__(self, logger: Optional[Union[logging.Logger, str]] = None):
        if logger is None or isinstance(logger, str):
            logger = logging.getLogger(logger or "chainlog.entries")
        self.logger = logger

    def __call__(self, entry: Log) -> None:
        level = STDLIB_LEVELS[entry.level]
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(
            level,
            "%s",
            get_config().format(entry),
            extra={"chainlog_entry": entry},
        )

    def __repr__(self) -> str:
        return f"LoggingOutput({self.logger.name!r})"
