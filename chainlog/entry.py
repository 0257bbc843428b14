"""
Log - an immutable, chainable log entry.

Every chain method returns a new Log; the operand is never modified, so a
partially built entry can be shared between threads or stored and reused:

    log = chainlog.module("db").fields({"table": "users"})
    log.print("connected")
    log.field("rows", 42).debug("fetched")
"""

from dataclasses import dataclass, field as dc_field, replace
from enum import IntEnum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from . import clock, enrich, stacks, timing
from .context import get_config
from .config import LogConfig
from .fieldmap import EMPTY, merge, stringify
from .stacks import Frame


class Level(IntEnum):
    """Log levels."""
    INFO = 0
    ERROR = 1
    DEBUG = 2
    TRACE = 3

    @property
    def label(self) -> str:
        return self.name


def _join(args: tuple) -> str:
    return " ".join(stringify(a) for a in args)


def _sprintf(fmt: str, args: tuple) -> str:
    if not args:
        return fmt
    try:
        return fmt % args
    except (TypeError, ValueError, KeyError):
        return " ".join([fmt, *(stringify(a) for a in args)])


@dataclass(frozen=True)
class Log:
    """
    A log entry.

    Build one with the chain methods and finish with print(), error() or
    debug(). trace() and since() return a new entry for further chaining.
    """
    # Message; set with print(), debug(), trace()
    msg: str = ""

    # Original error, set with error(); shown instead of msg
    err: Optional[BaseException] = None

    level: Level = Level.INFO

    # Modules added with module(), outermost first
    modules: tuple[str, ...] = ()

    # Fields added with fields()/field()
    data: Mapping[str, Any] = dc_field(default_factory=lambda: EMPTY)

    # Modules to debug for this chain only
    debug_modules: tuple[str, ...] = ()

    # Formatted trace lines, printed before an error
    traces: tuple[str, ...] = ()

    # Opaque value for custom outputs; not used by chainlog
    ctx: Any = None

    # Stack captured at error() time
    stack: tuple[Frame, ...] = ()

    # Last since() checkpoint (monotonic nanoseconds)
    since_anchor: int = dc_field(default_factory=lambda: clock.monotonic())

    # Durations recorded with since()
    since_log: Mapping[str, str] = dc_field(default_factory=lambda: EMPTY)

    # Unhashable: data and since_log are mappings
    __hash__ = None

    def __post_init__(self):
        if not isinstance(self.level, Level):
            object.__setattr__(self, "level", Level(self.level))
        for name in ("modules", "debug_modules", "traces", "stack"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))
        for name in ("data", "since_log"):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, MappingProxyType(dict(value)))

    # Chaining

    def module(self, name: str) -> "Log":
        """Add a module; also resets the since() checkpoint."""
        return replace(self, modules=self.modules + (name,), since_anchor=clock.monotonic())

    def fields(self, data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "Log":
        """Merge fields; later values overwrite earlier ones for the same key."""
        extra = dict(data or {})
        extra.update(kwargs)
        return replace(self, data=merge(self.data, extra))

    def field(self, key: str, value: Any) -> "Log":
        """Set one field."""
        return self.fields({key: value})

    def set_debug(self, *names: str) -> "Log":
        """Debug these modules for this chain, in addition to the global list."""
        return replace(self, debug_modules=self.debug_modules + names)

    def context(self, ctx: Any) -> "Log":
        """Attach an opaque value for use by custom outputs."""
        return replace(self, ctx=ctx)

    def reset_trace(self) -> "Log":
        """Drop all lines recorded with trace() and tracef()."""
        return replace(self, traces=())

    def fields_since(self) -> "Log":
        """Add the timings recorded with since() as fields."""
        return self.fields(self.since_log)

    def fields_request(self, request: Any) -> "Log":
        """Add information from an HTTP request as fields."""
        return self.fields(enrich.request_fields(request))

    def fields_location(self, depth: int = 0) -> "Log":
        """Record the caller's location as the "location" field."""
        return self.fields(enrich.location(depth + 1))

    # Debug gate

    def has_debug(self, config: Optional[LogConfig] = None) -> bool:
        """
        Report if any module of this entry is being debugged, either globally
        or for this chain. Entries without modules are never debugged.
        """
        if not self.modules:
            return False
        if config is None:
            config = get_config()
        active = set(config.debug)
        active.update(self.debug_modules)
        if "all" in active:
            return True
        return any(m in active for m in self.modules)

    # Terminal calls

    def print(self, *args: Any) -> None:
        """Print an informational message."""
        get_config().run_outputs(replace(self, msg=_join(args), level=Level.INFO))

    def printf(self, fmt: str, *args: Any) -> None:
        """Print an informational message, %-formatted."""
        get_config().run_outputs(replace(self, msg=_sprintf(fmt, args), level=Level.INFO))

    def error(self, err: Any) -> None:
        """Print an error; non-exceptions are wrapped in a RuntimeError."""
        if not isinstance(err, BaseException):
            err = RuntimeError(stringify(err))
        self._error(err)

    def errorf(self, fmt: str, *args: Any) -> None:
        """Print an error built from a %-format string."""
        self._error(RuntimeError(_sprintf(fmt, args)))

    def _error(self, err: BaseException) -> None:
        config = get_config()
        stack = stacks.for_error(err) if config.stack_trace else ()
        config.run_outputs(replace(self, err=err, level=Level.ERROR, stack=stack))

    def debug(self, *args: Any) -> None:
        """Print debug information; does nothing unless a module is debugged."""
        config = get_config()
        if not self.has_debug(config):
            return
        config.run_outputs(replace(self, msg=_join(args), level=Level.DEBUG))

    def debugf(self, fmt: str, *args: Any) -> None:
        config = get_config()
        if not self.has_debug(config):
            return
        config.run_outputs(replace(self, msg=_sprintf(fmt, args), level=Level.DEBUG))

    # Non-terminal recording

    def trace(self, *args: Any) -> "Log":
        """
        Record a trace line.

        When a module is debugged it's printed right away. Otherwise it's kept
        and printed only if this chain later ends in error().
        """
        return self._trace(_join(args))

    def tracef(self, fmt: str, *args: Any) -> "Log":
        return self._trace(_sprintf(fmt, args))

    def _trace(self, msg: str) -> "Log":
        config = get_config()
        entry = replace(self, msg=msg, level=Level.TRACE)
        if self.has_debug(config):
            config.run_outputs(entry)
            return self
        return replace(self, traces=self.traces + (config.format(entry),))

    def since(self, label: str) -> "Log":
        """
        Record the time since the last since() or module() call.

        The duration is written to the debug stream if a module is debugged,
        and can be added as fields with fields_since().
        """
        config = get_config()
        now = clock.monotonic()
        ms = timing.elapsed_ms(self.since_anchor, now)
        if self.has_debug(config):
            timing.write_line(config.debug_writer(), timing.since_line(self.modules, ms, label))
        return replace(
            self,
            since_log=merge(self.since_log, {label: f"{ms}ms"}),
            since_anchor=now,
        )


def module(name: str) -> Log:
    return Log().module(name)


def fields(data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Log:
    return Log().fields(data, **kwargs)


def field(key: str, value: Any) -> Log:
    return Log().field(key, value)


def set_debug(*names: str) -> Log:
    return Log(debug_modules=names)


def fields_request(request: Any) -> Log:
    """Start an entry with information from an HTTP request as fields."""
    return Log().fields_request(request)


def fields_location(depth: int = 0) -> Log:
    """Start an entry with the caller's location as a field."""
    return Log().fields_location(depth + 1)


def print_(*args: Any) -> None:
    Log().print(*args)


def printf(fmt: str, *args: Any) -> None:
    Log().printf(fmt, *args)


def error(err: Any) -> None:
    Log().error(err)


def errorf(fmt: str, *args: Any) -> None:
    Log().errorf(fmt, *args)
