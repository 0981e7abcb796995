"""
Finalizer: Package Initializer
================================

What: Request-completion hook for ASGI servers plus a structured access log
      built on top of it.
Who:  Imported by host applications (FastAPI / Starlette / any ASGI app),
      by uvicorn (`uvicorn finalizer.main:app`) and by pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │     logutil (access-log consumer)    │  ← reads the finalizer context
    ├─────────────────────────────────────┤
    │   middleware.finalizing              │  ← runs the callback on every exit
    ├─────────────────────────────────────┤
    │   middleware.intercept               │  ← observes status / bytes / headers
    ├─────────────────────────────────────┤
    │   context (typed accessors)          │  ← private ContextVar slots
    └─────────────────────────────────────┘
"""

from finalizer.context import response_headers, response_size
from finalizer.middleware.finalizing import FinalizerFunc, FinalizerMiddleware

__version__ = "1.0.0"

__all__ = [
    "FinalizerFunc",
    "FinalizerMiddleware",
    "response_headers",
    "response_size",
]
