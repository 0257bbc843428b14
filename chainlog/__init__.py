"""
chainlog - chainable structured logging.

Log entries are immutable values built by chaining and printed by a final
call. Debug and trace output is gated per module, trace lines are kept and
only shown when the chain ends in an error, and since() records timings.

Usage:
    import chainlog

    chainlog.configure(chainlog.load_config("config.yaml"))

    log = chainlog.module("pool").fields({"backend": "gemini"})
    log.print("request started")

    l = log.trace("sending prompt").since("prepare")
    try:
        send()
    except Exception as e:
        l.error(e)          # prints the trace line first
    else:
        l.since("send").fields_since().print("done")

    with chainlog.recover():
        ... work in a thread ...
"""

import logging

from .config import LogConfig, OutputFunc, load_config, parse_debug
from .context import configure, get_config, use_config
from .entry import (
    Level,
    Log,
    error,
    errorf,
    field,
    fields,
    fields_location,
    fields_request,
    module,
    print_,
    printf,
    set_debug,
)
from .errors import ChainlogError, ConfigError, MissingRequestError, RecoveredPanic
from .fieldmap import F, FieldKind, Raw
from .formatters import format_json, format_text
from .outputs import LoggingOutput, StreamOutput, output_std
from .profile import profile_cpu, profile_heap
from .recovery import guard, recover
from .stacks import Frame, StackFilter

# chainlog's own diagnostics go nowhere unless the application says so
logging.getLogger("chainlog").addHandler(logging.NullHandler())

info = print_

__all__ = [
    "Log",
    "Level",
    "F",
    "Raw",
    "FieldKind",
    "module",
    "fields",
    "field",
    "set_debug",
    "fields_request",
    "fields_location",
    "print_",
    "info",
    "printf",
    "error",
    "errorf",
    "LogConfig",
    "OutputFunc",
    "load_config",
    "parse_debug",
    "configure",
    "get_config",
    "use_config",
    "format_text",
    "format_json",
    "output_std",
    "StreamOutput",
    "LoggingOutput",
    "recover",
    "guard",
    "profile_cpu",
    "profile_heap",
    "Frame",
    "StackFilter",
    "ChainlogError",
    "ConfigError",
    "MissingRequestError",
    "RecoveredPanic",
]

__version__ = "0.1.0"
