"""
Finalizer: Structured Access Log
==================================

What:  A ready-made finalizer that logs one structured record per request.
Why:   Uvicorn's access log is written before the body is streamed, so it
       cannot report the response size. Hooking the finalizer gets the final
       status and the exact byte count.
How:   HTTPLogger.logging_finalizer matches the FinalizerFunc signature and is
       passed straight to FinalizerMiddleware.

Record fields (in order, absent fields are omitted, never emitted empty):
    method         request method
    status         final status code seen by the interceptor
    proto          "HTTP/<http_version>"
    host           client address with the port stripped
    user_agent     User-Agent header ("" when missing)
    referer        Referer header, only when non-empty
    response_size  body bytes written, only when the context carries it

Example (logged through stdlib logging, fields also in `extra`):
    method=GET status=200 proto=HTTP/1.1 host=10.0.0.5 user_agent=curl/8.4.0 response_size=123
"""

import contextvars
import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from starlette.requests import Request

from finalizer.context import response_size
from finalizer.exceptions import AddressError

_logger = logging.getLogger("finalizer.access")


def split_host_port(addr: str) -> Tuple[str, str]:
    """
    Split "host:port", "[ipv6]:port" into (host, port).

    Raises AddressError when the port is missing, the host holds bare
    colons, or brackets are unbalanced. The port is returned as a string
    and may be empty ("host:" is valid).
    """
    i = addr.rfind(":")
    if i < 0:
        raise AddressError(addr, "missing port in address")

    if addr.startswith("["):
        end = addr.find("]")
        if end < 0:
            raise AddressError(addr, "missing ']' in address")
        if end + 1 == len(addr):
            raise AddressError(addr, "missing port in address")
        if end + 1 != i:
            if addr[end + 1] == ":":
                raise AddressError(addr, "too many colons in address")
            raise AddressError(addr, "missing port in address")
        host = addr[1:end]
        j, k = 1, end + 1
    else:
        host = addr[:i]
        if ":" in host:
            raise AddressError(addr, "too many colons in address")
        j, k = 0, 0

    if "[" in addr[j:]:
        raise AddressError(addr, "unexpected '[' in address")
    if "]" in addr[k:]:
        raise AddressError(addr, "unexpected ']' in address")

    return host, addr[i + 1:]


def remote_addr(request: Request) -> str:
    """
    Render the ASGI `client` of a request as a "host:port" string.

    The scope holds a (host, port) pair for TCP clients, or nothing at all
    (unix sockets, some test clients). IPv6 hosts are bracketed.
    """
    client = request.scope.get("client")
    if not client:
        return ""
    if isinstance(client, str):
        return client
    host = client[0]
    port = client[1] if len(client) > 1 else None
    if port is None:
        return str(host)
    if ":" in str(host):
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def client_host(request: Request) -> str:
    """Client address without its port; the raw address if it cannot be split."""
    addr = remote_addr(request)
    try:
        host, _ = split_host_port(addr)
    except AddressError:
        host = addr
    return host


def access_fields(
    ctx: contextvars.Context, code: int, request: Request
) -> Dict[str, Any]:
    """Build the ordered access-log record for one finished request."""
    fields: Dict[str, Any] = {
        "method": request.method,
        "status": code,
        "proto": "HTTP/" + request.scope.get("http_version", "1.1"),
        "host": client_host(request),
        "user_agent": request.headers.get("user-agent", ""),
    }

    referer = request.headers.get("referer", "")
    if referer:
        fields["referer"] = referer

    size, ok = response_size(ctx)
    if ok:
        fields["response_size"] = size

    return fields


def _format_value(value: Any) -> str:
    text = str(value)
    if text == "" or any(c in text for c in ' ="'):
        return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return text


class HTTPLogger:
    """
    Wraps a stdlib Logger so it can act as a FinalizerFunc.

    Usage:
        http_logger = HTTPLogger(logging.getLogger("myapp.access"))
        app.add_middleware(FinalizerMiddleware, finalizer=http_logger.logging_finalizer)

    Log level follows the status code:
        5xx → ERROR, 4xx → WARNING, everything else → INFO

    A 500 page written by an error handler outside the middleware is not
    seen: an unhandled exception logs status=200 response_size=0.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        exclude_paths: Iterable[str] = (),
    ) -> None:
        self.logger = logger or _logger
        self.exclude_paths = frozenset(exclude_paths)

    def logging_finalizer(
        self, ctx: contextvars.Context, code: int, request: Request
    ) -> None:
        """Log information about a completed HTTP request."""
        if request.scope.get("path") in self.exclude_paths:
            return

        fields = access_fields(ctx, code, request)

        if code >= 500:
            level = logging.ERROR
        elif code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        self.logger.log(
            level,
            " ".join(f"{key}={_format_value(value)}" for key, value in fields.items()),
            extra=fields,
        )
