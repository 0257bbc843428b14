"""
Configuration for chainlog.

A LogConfig holds the sinks, the global debug-module list, the formatter and
its options. It is built once at startup (directly, or with load_config() from
a YAML file plus environment overrides) and installed with
chainlog.configure(); after that it is only read.

config.yaml:

    chainlog:
      debug: "db,http"        # or a list; "all" enables every module
      fmt_time: "%H:%M:%S "
      format: text            # text | json
      colors: false
      stack_trace: true
      stack_filter:
        exclude: ["site-packages/werkzeug"]
"""

import logging
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, TextIO, Union

import yaml

from .errors import ConfigError
from .stacks import StackFilter

if TYPE_CHECKING:
    from .entry import Log

log = logging.getLogger(__name__)
output_log = logging.getLogger("chainlog.outputs")

# A sink: receives a fully populated entry.
OutputFunc = Callable[["Log"], None]

DEFAULT_FMT_TIME = "%H:%M:%S "

_TRUE = {"1", "true", "yes", "on"}


def _default_outputs() -> list:
    from .outputs import output_std
    return [output_std]


def _default_format() -> Callable[["Log"], str]:
    from .formatters import format_text
    return format_text


def formatter_by_name(name: str) -> Callable[["Log"], str]:
    """Look up a built-in formatter: "text" or "json"."""
    from .formatters import format_json, format_text
    formatters = {"text": format_text, "json": format_json}
    try:
        return formatters[name.strip().lower()]
    except KeyError:
        raise ConfigError(f"unknown formatter {name!r} (expected text or json)", key="format")


def parse_debug(csv: str) -> list[str]:
    """Parse a comma-separated module list; an empty string gives []."""
    csv = csv.strip()
    if not csv:
        return []
    return [m.strip() for m in csv.split(",") if m.strip()]


@dataclass
class LogConfig:
    """
    chainlog configuration.

    Outputs are run in order for every entry. The default prints errors to
    stderr and everything else to stdout; usually you want to keep it and add
    outputs rather than replace it:

        def notify(entry):
            if entry.level is not Level.ERROR:
                return
            ... send to an error notification service ...

        config.outputs.append(notify)
    """
    # Sinks for a log entry
    outputs: list = field(default_factory=_default_outputs)

    # Always print debug information for these modules; "all" for every module
    debug: list[str] = field(default_factory=list)

    # Formatter used by the built-in sinks and for buffered trace lines
    format: Callable[["Log"], str] = field(default_factory=_default_format)

    # strftime() layout for the timestamp in the text formatter
    fmt_time: str = DEFAULT_FMT_TIME

    # Filter for error stack traces
    stack_filter: Optional[StackFilter] = None

    # Color the level in the text formatter
    colors: bool = False

    # Render stack traces for errors
    stack_trace: bool = True

    # Destination for since() timing lines; None means the current sys.stderr
    debug_stream: Optional[TextIO] = None

    def set_debug(self, csv: str) -> None:
        """Set the debug list from a comma-separated list of module names."""
        self.debug = parse_debug(csv)

    def add_output(self, output: OutputFunc) -> None:
        """Append an output after the existing ones."""
        self.outputs.append(output)

    def run_outputs(self, entry: "Log") -> None:
        """
        Send an entry to every output.

        An output that raises does not stop the others; the failure is
        reported through the stdlib logger "chainlog.outputs".
        """
        for output in list(self.outputs):
            try:
                output(entry)
            except Exception:
                output_log.warning("chainlog: output %r failed", output, exc_info=True)

    def debug_writer(self) -> TextIO:
        return self.debug_stream if self.debug_stream is not None else sys.stderr


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE
    raise ConfigError(f"expected a boolean, got {value!r}", key=key)


def _as_str_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return parse_debug(value)
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return [v.strip() for v in value if v.strip()]
    raise ConfigError(f"expected a list of strings, got {value!r}", key=key)


def _stack_filter(value: Any) -> Optional[StackFilter]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ConfigError("expected a mapping with include/exclude", key="stack_filter")
    unknown = set(value) - {"include", "exclude"}
    if unknown:
        raise ConfigError(f"unknown keys {sorted(unknown)}", key="stack_filter")
    try:
        return StackFilter(
            include=_as_str_list(value.get("include"), "stack_filter.include"),
            exclude=_as_str_list(value.get("exclude"), "stack_filter.exclude"),
        )
    except re.error as e:
        raise ConfigError(f"bad pattern: {e}", key="stack_filter") from e


def apply_options(config: LogConfig, options: Mapping[str, Any]) -> LogConfig:
    """Apply a mapping of options (as found in config.yaml) to a config."""
    for key, value in options.items():
        if key == "debug":
            config.debug = _as_str_list(value, key)
        elif key == "fmt_time":
            if not isinstance(value, str):
                raise ConfigError(f"expected a string, got {value!r}", key=key)
            config.fmt_time = value
        elif key == "format":
            if not isinstance(value, str):
                raise ConfigError(f"expected a string, got {value!r}", key=key)
            config.format = formatter_by_name(value)
        elif key == "colors":
            config.colors = _as_bool(value, key)
        elif key == "stack_trace":
            config.stack_trace = _as_bool(value, key)
        elif key == "stack_filter":
            config.stack_filter = _stack_filter(value)
        else:
            raise ConfigError("unknown option", key=key)
    return config


def apply_env(config: LogConfig, environ: Optional[Mapping[str, str]] = None) -> LogConfig:
    """Apply CHAINLOG_DEBUG, CHAINLOG_FORMAT and CHAINLOG_COLORS overrides."""
    environ = os.environ if environ is None else environ
    if "CHAINLOG_DEBUG" in environ:
        config.set_debug(environ["CHAINLOG_DEBUG"])
    if environ.get("CHAINLOG_FORMAT"):
        config.format = formatter_by_name(environ["CHAINLOG_FORMAT"])
    if "CHAINLOG_COLORS" in environ:
        config.colors = environ["CHAINLOG_COLORS"].strip().lower() in _TRUE
    return config


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> LogConfig:
    """
    Build a LogConfig from a YAML file and the environment.

    Args:
        path: YAML file; options are read from its "chainlog" key, or from the
            top level when there is none. A missing file gives the defaults.
        environ: Environment to read overrides from (default: os.environ)

    Returns:
        A new LogConfig
    """
    config = LogConfig()
    if path is not None:
        path = Path(path)
        if path.exists():
            try:
                raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"cannot parse {path}: {e}") from e
            if not isinstance(raw, Mapping):
                raise ConfigError(f"{path}: expected a mapping at the top level")
            section = raw.get("chainlog", raw) or {}
            if not isinstance(section, Mapping):
                raise ConfigError("expected a mapping", key="chainlog")
            apply_options(config, section)
            log.debug("chainlog: loaded config from %s", path)
        else:
            log.debug("chainlog: %s not found, using defaults", path)
    return apply_env(config, environ)
