"""
Active configuration management.

The process-wide config is installed once with configure(). use_config()
overrides it for the current context only; it uses a ContextVar, so the
override is async-safe and does not leak into other threads or tasks.
"""

import threading
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generator, Optional

from .config import LogConfig, load_config

_override: ContextVar[Optional[LogConfig]] = ContextVar("chainlog_config", default=None)

_default: Optional[LogConfig] = None
_default_lock = threading.Lock()


def get_config() -> LogConfig:
    """Get the active config: the context override, else the process default."""
    config = _override.get()
    if config is not None:
        return config
    return _process_default()


def _process_default() -> LogConfig:
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = load_config()
    return _default


def configure(config: Optional[LogConfig] = None) -> LogConfig:
    """
    Install the process-wide config.

    Call once at startup, before logging from other threads. With no argument
    the defaults plus environment overrides are installed.

    Returns:
        The installed config
    """
    global _default
    with _default_lock:
        _default = config if config is not None else load_config()
        return _default


@contextmanager
def use_config(config: LogConfig) -> Generator[LogConfig, None, None]:
    """
    Context manager to use a config for the current context.

    Example:
        with use_config(LogConfig(debug=["db"])):
            module("db").debug("visible")
    """
    token = _override.set(config)
    try:
        yield config
    finally:
        _override.reset(token)
