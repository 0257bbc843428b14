"""
Formatters: turn a Log entry into text.

format_text is the default. format_json writes one JSON object per entry and
can be swapped in with LogConfig(format=format_json) or `format: json` in
config.yaml.
"""

import json
from typing import Any

from . import clock, stacks
from .config import LogConfig
from .context import get_config
from .entry import Level, Log
from .fieldmap import render_fields, stringify, to_json_value

# ANSI color codes
COLORS = {
    Level.INFO: "\033[32m",     # Green
    Level.ERROR: "\033[31m",    # Red
    Level.DEBUG: "\033[36m",    # Cyan
    Level.TRACE: "\033[35m",    # Magenta
}
BLOCKS = {
    Level.INFO: "\033[42m",
    Level.ERROR: "\033[41m",
    Level.DEBUG: "\033[46m",
    Level.TRACE: "\033[45m",
}
RESET = "\033[0m"


def body(entry: Log) -> str:
    """The error text if there is an error, otherwise the message."""
    if entry.err is not None:
        return stringify(entry.err) or type(entry.err).__name__
    return entry.msg


def error_frames(entry: Log, config: LogConfig) -> tuple:
    """Stack frames to show for an entry, after the configured filter."""
    if not config.stack_trace or not entry.stack:
        return ()
    if config.stack_filter is not None:
        return config.stack_filter.apply(entry.stack)
    return entry.stack


def format_text(entry: Log) -> str:
    """
    Format an entry for console output.

    Format: [block] time module1: module2: LEVEL: message {k=v ...}

    Errors are preceded by any buffered trace lines and followed by the stack
    trace. There is no trailing newline.
    """
    config = get_config()
    b = []

    if entry.level is Level.ERROR:
        for t in entry.traces:
            b.append(t)
            b.append("\n")

    if config.colors:
        b.append(f"{BLOCKS[entry.level]}  {RESET} ")

    b.append(clock.now().strftime(config.fmt_time))
    for m in entry.modules:
        b.append(f"{m}: ")

    if config.colors:
        b.append(f"{COLORS[entry.level]}{entry.level.label}:{RESET} ")
    else:
        b.append(f"{entry.level.label}: ")

    b.append(body(entry))

    if entry.data:
        b.append(" {" + render_fields(entry.data) + "}")

    if entry.level is Level.ERROR:
        b.append(stacks.render(error_frames(entry, config)))

    return "".join(b)


def format_json(entry: Log) -> str:
    """
    Format an entry as a single JSON object.

    Keys: time, level, modules, msg or error, fields; errors also get traces
    and stack.
    """
    config = get_config()
    record: dict[str, Any] = {
        "time": clock.now().isoformat(),
        "level": entry.level.label,
        "modules": list(entry.modules),
    }

    if entry.err is not None:
        record["error"] = body(entry)
        record["error_class"] = type(entry.err).__name__
    else:
        record["msg"] = entry.msg

    if entry.data:
        record["fields"] = {k: to_json_value(entry.data[k]) for k in sorted(entry.data)}

    if entry.level is Level.ERROR:
        if entry.traces:
            record["traces"] = list(entry.traces)
        frames = error_frames(entry, config)
        if frames:
            record["stack"] = [
                {"function": f.function, "file": f.file, "line": f.line} for f in frames
            ]

    return json.dumps(record, ensure_ascii=False, default=stringify)
