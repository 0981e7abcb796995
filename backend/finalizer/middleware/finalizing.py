"""
Finalizer: Finalizing Middleware
==================================

What:  Pure ASGI middleware that calls a user-supplied finalizer exactly once
       per HTTP request, after the wrapped application has finished.
Why:   Access logs, audit trails and similar consumers need the *final*
       status code and byte count, even when the application raises or the
       request task is cancelled half-way through the body.
How:   For each http scope:
       1. Wrap `send` in a fresh InterceptingSend
       2. Run the inner app with the wrapped send
       3. In `finally` (normal return, exception, cancellation), shielded
          from the cancelled scope so async finalizers can still await:
          derive a context carrying the headers + byte count, then call
          finalizer(ctx, status_code, request)

Fault handling:
    Exceptions from the inner app are not suppressed; finalization runs and
    the exception keeps propagating. Exceptions from the finalizer itself are
    not caught here either.
"""

import contextvars
import inspect
import logging
from typing import Awaitable, Callable, Union

import anyio
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from finalizer.context import with_response_record
from finalizer.exceptions import InvalidFinalizerError
from finalizer.middleware.intercept import InterceptingSend

logger = logging.getLogger(__name__)

# finalizer(ctx, status_code, request); may be a plain or a coroutine function
FinalizerFunc = Callable[
    [contextvars.Context, int, Request], Union[None, Awaitable[None]]
]


class FinalizerMiddleware:
    """
    Calls `finalizer` at the end of every HTTP request.

    Usage:
        app.add_middleware(FinalizerMiddleware, finalizer=http_logger.logging_finalizer)

        # or around any ASGI app
        wrapped = FinalizerMiddleware(inner_app, finalizer=on_done)

    Only "http" scopes are finalized. Websocket and lifespan traffic passes
    straight through.
    """

    def __init__(self, app: ASGIApp, finalizer: FinalizerFunc) -> None:
        if not callable(finalizer):
            raise InvalidFinalizerError(finalizer)
        self.app = app
        self.finalizer = finalizer

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        interceptor = InterceptingSend(send)
        try:
            await self.app(scope, receive, interceptor)
        finally:
            # An aborted request must not cancel the finalizer along with it.
            with anyio.CancelScope(shield=True):
                await self._finalize(interceptor, request)

    async def _finalize(self, interceptor: InterceptingSend, request: Request) -> None:
        ctx = with_response_record(interceptor.headers, interceptor.written)
        logger.debug(
            "Finalizing %s %s status=%d written=%d",
            request.scope.get("method", ""),
            request.scope.get("path", ""),
            interceptor.status_code,
            interceptor.written,
        )
        result = self.finalizer(ctx, interceptor.status_code, request)
        if inspect.isawaitable(result):
            await result
