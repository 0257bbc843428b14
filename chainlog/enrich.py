"""
Field producers for HTTP requests and call-site locations.

Requests are read, never modified. Anything shaped like a werkzeug/Flask
Request works: method, path, query_string, form, host, headers, user_agent.
"""

import os
import sys
from typing import Any
from urllib.parse import urlencode

from .errors import MissingRequestError

HEADER_SEPARATOR = " · "


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return "" if value is None else str(value)


def _url(request: Any) -> str:
    path = _text(getattr(request, "path", ""))
    query = _text(getattr(request, "query_string", b""))
    return f"{path}?{query}" if query else path


def _form(request: Any) -> str:
    form = getattr(request, "form", None)
    if not form:
        return ""
    try:
        pairs = list(form.items(multi=True))
    except TypeError:
        pairs = list(form.items())
    return urlencode(sorted(pairs, key=lambda kv: kv[0]))


def _headers(request: Any) -> str:
    headers = getattr(request, "headers", None)
    if not headers:
        return ""
    # Last value wins for repeated names
    last = {}
    for name, value in headers.items():
        last[name] = value
    return HEADER_SEPARATOR.join(f"{name}: {last[name]}" for name in sorted(last))


def _user_agent(request: Any) -> str:
    ua = getattr(request, "user_agent", None)
    if ua is None:
        return ""
    return _text(getattr(ua, "string", ua))


def request_fields(request: Any) -> dict[str, str]:
    """
    Fields describing an HTTP request.

    Args:
        request: werkzeug/Flask Request or compatible object

    Returns:
        http_method, http_url, http_form, http_headers, http_host and
        http_user_agent

    Raises:
        MissingRequestError: request is None
    """
    if request is None:
        raise MissingRequestError()

    return {
        "http_method": _text(getattr(request, "method", "")),
        "http_url": _url(request),
        "http_form": _form(request),
        "http_headers": _headers(request),
        "http_host": _text(getattr(request, "host", "")),
        "http_user_agent": _user_agent(request),
    }


def location(depth: int = 0) -> dict[str, str]:
    """
    Location of a caller as {"location": "file.py:123"}.

    depth=0 is the code that called location(); each level above adds one.
    """
    frame = sys._getframe(depth + 1)
    return {"location": f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}"}
