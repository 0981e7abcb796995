# Middleware package init
"""
Finalizer: Middleware Package
===============================

What:  The ASGI layer: a `send` interceptor and the middleware that uses it.

Message flow for one HTTP request:
    Server → [FinalizerMiddleware] → inner app
                     │
                     └── send = InterceptingSend(real send)

    inner app ──send(start/body)──→ InterceptingSend ──→ real send
                                         │
                                         └─ status_code, written, headers

    on exit (return / raise / cancel):
        finalizer(ctx_with_headers_and_size, status_code, request)
"""

from finalizer.middleware.finalizing import FinalizerFunc, FinalizerMiddleware
from finalizer.middleware.intercept import DEFAULT_STATUS_CODE, InterceptingSend

__all__ = [
    "DEFAULT_STATUS_CODE",
    "FinalizerFunc",
    "FinalizerMiddleware",
    "InterceptingSend",
]
