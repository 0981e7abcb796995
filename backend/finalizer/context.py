"""
Finalizer: Context Accessors
==============================

What:  Private context slots for the finalizer record, plus typed getters.
Why:   The finalizer callback needs the response headers and byte count, but
       nothing else in the process should be able to see or alias them.
How:   Two module-private ContextVar objects act as the keys. The middleware
       writes them into a *copy* of the current context (see
       `with_response_record`), so the request's own context never carries
       them. Accessors read from whichever context they are handed.

Accessor contract:
    response_headers(ctx) -> (Headers | None, found)
    response_size(ctx)    -> (int | None, found)

    `found` is False when ctx is not a contextvars.Context, when the slot is
    absent, or when the stored value has the wrong type. Accessors never raise.
"""

import contextvars
from typing import Any, Optional, Tuple

from starlette.datastructures import Headers

# Distinct ContextVar objects are collision-free by identity; the names are
# only for repr() and debugging.
_response_headers_var: contextvars.ContextVar[Headers] = contextvars.ContextVar(
    "finalizer_response_headers"
)
_response_size_var: contextvars.ContextVar[int] = contextvars.ContextVar(
    "finalizer_response_size"
)


def with_response_record(headers: Headers, size: int) -> contextvars.Context:
    """
    Derive a copy of the current context carrying the finalizer record.

    The caller's context is left untouched: ContextVar.set() inside
    Context.run() only affects the copied context.
    """
    ctx = contextvars.copy_context()
    ctx.run(_store_record, headers, size)
    return ctx


def _store_record(headers: Headers, size: int) -> None:
    _response_headers_var.set(headers)
    _response_size_var.set(size)


def _lookup(ctx: Any, var: contextvars.ContextVar) -> Tuple[Any, bool]:
    if not isinstance(ctx, contextvars.Context):
        return None, False
    if var not in ctx:
        return None, False
    return ctx[var], True


def response_headers(ctx: Any) -> Tuple[Optional[Headers], bool]:
    """Return the response headers captured when the request finished."""
    value, found = _lookup(ctx, _response_headers_var)
    if not found or not isinstance(value, Headers):
        return None, False
    return value, True


def response_size(ctx: Any) -> Tuple[Optional[int], bool]:
    """Return the number of body bytes written for the finished request."""
    value, found = _lookup(ctx, _response_size_var)
    # bool is an int subclass; a stray True is not a byte count
    if not found or isinstance(value, bool) or not isinstance(value, int):
        return None, False
    return value, True
