"""
Recover from exceptions in units of work and report them as errors.

    def worker():
        with chainlog.recover():
            ... do work ...

    threading.Thread(target=worker).start()

The first callback is called before the error is printed and can be used to
modify the entry, for example to add fields; if it returns None the entry is
used unchanged:

    with chainlog.recover(lambda l: l.fields({"id": job_id})):
        ...

Any other callbacks are called after the error is printed, with the same
entry; what they return is ignored.
"""

import functools
import inspect
from contextlib import contextmanager
from typing import Any, Callable, Generator, Optional

from . import stacks
from .entry import Log, module
from .errors import RecoveredPanic

Callback = Callable[[Log], Optional[Log]]


def report_panic(exc: Exception, callbacks: tuple = ()) -> RecoveredPanic:
    """
    Print an exception as a "panic" error entry.

    Returns:
        The RecoveredPanic that was logged
    """
    panic = RecoveredPanic(exc, stacks.from_traceback(exc.__traceback__))

    entry = module("panic")
    if callbacks:
        entry = callbacks[0](entry) or entry

    entry.error(panic)

    for cb in callbacks[1:]:
        cb(entry)
    return panic


@contextmanager
def recover(*callbacks: Callback) -> Generator[None, None, None]:
    """
    Context manager that logs and suppresses any Exception from its block.

    KeyboardInterrupt, SystemExit and asyncio cancellation are not caught.
    """
    try:
        yield
    except Exception as exc:
        report_panic(exc, callbacks)


def guard(*callbacks: Callback) -> Callable:
    """
    Decorator form of recover(), for functions and coroutines.

    A call that raised returns None.

        @chainlog.guard()
        async def consume(msg):
            ...
    """
    def decorator(fn: Callable) -> Callable:
        if inspect.iscoroutinefunction(fn):
            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with recover(*callbacks):
                    return await fn(*args, **kwargs)
                return None
            return async_wrapper

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with recover(*callbacks):
                return fn(*args, **kwargs)
            return None
        return wrapper

    return decorator
