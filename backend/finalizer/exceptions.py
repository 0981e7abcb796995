"""
Finalizer: Custom Exception Hierarchy
=======================================

What:  Errors raised by this package itself.
Why:   Configuration mistakes and malformed addresses get a specific type that
       callers can catch without also catching unrelated failures.
When:  At middleware construction time, or while rendering an access record.

Exception Hierarchy:
    FinalizerError (base)
    ├── InvalidFinalizerError  → middleware built with a non-callable finalizer
    └── AddressError           → remote address is not a valid host:port pair

Errors coming from the wrapped ASGI `send` or from the inner application are
NOT wrapped in these types. They propagate exactly as raised.
"""

from typing import Any, Dict, Optional


class FinalizerError(Exception):
    """
    Base exception for all errors raised by this package.

    Attributes:
        message:  Human-readable error description
        context:  Additional debug info (logged, never sent to a client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidFinalizerError(FinalizerError):
    """Raised when FinalizerMiddleware is given something that cannot be called."""

    def __init__(
        self,
        finalizer: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["finalizer_type"] = type(finalizer).__name__
        super().__init__(
            message=f"finalizer must be callable, got {type(finalizer).__name__}",
            context=ctx,
        )


class AddressError(FinalizerError):
    """
    Raised when a network address cannot be split into host and port.

    What:    The string is missing a port, has too many colons, or has
             unbalanced IPv6 brackets.
    Who:     Raised by `logutil.split_host_port`; the access logger catches it
             and falls back to the raw address.
    """

    def __init__(
        self,
        address: str = "",
        reason: str = "invalid address",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["address"] = address
        ctx["reason"] = reason
        super().__init__(message=f"address {address}: {reason}", context=ctx)
        self.address = address
        self.reason = reason
