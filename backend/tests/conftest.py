"""
Finalizer: Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── make_scope: Factory for minimal ASGI http scopes
    ├── receive: ASGI receive returning an empty request body
    ├── sent_messages / recording_send: Fake server `send` that records messages
    ├── finalizer_calls / recording_finalizer: Finalizer spy
    └── test_client: HTTPX AsyncClient bound to the demo app
"""

import asyncio
import contextvars
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any app imports
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ACCESS_LOGGER_NAME"] = "finalizer.access"
os.environ["ACCESS_LOG_EXCLUDE_PATHS"] = ""


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_scope():
    """
    Factory for ASGI http scopes.

    Usage:
        scope = make_scope(method="POST", headers=[(b"user-agent", b"x")])
    """

    def factory(
        method: str = "GET",
        path: str = "/",
        headers: Optional[List[Tuple[bytes, bytes]]] = None,
        client: Any = ("127.0.0.1", 51234),
        http_version: str = "1.1",
        scope_type: str = "http",
    ) -> Dict[str, Any]:
        return {
            "type": scope_type,
            "asgi": {"version": "3.0", "spec_version": "2.4"},
            "http_version": http_version,
            "method": method,
            "scheme": "http",
            "path": path,
            "raw_path": path.encode(),
            "query_string": b"",
            "root_path": "",
            "headers": headers or [],
            "client": client,
            "server": ("testserver", 80),
        }

    return factory


@pytest.fixture
def receive():
    """
    ASGI receive: one empty request body, then blocks like an idle client.

    Blocking (rather than reporting http.disconnect) keeps Starlette's
    disconnect listener from cancelling streamed responses mid-test.
    """
    delivered = []

    async def _receive():
        if not delivered:
            delivered.append(True)
            return {"type": "http.request", "body": b"", "more_body": False}
        await asyncio.Event().wait()

    return _receive


@pytest.fixture
def sent_messages() -> List[Dict[str, Any]]:
    return []


@pytest.fixture
def recording_send(sent_messages):
    """Fake server send: records every message it accepts."""

    async def _send(message):
        sent_messages.append(message)

    return _send


@dataclass
class FinalizerCall:
    """One observed finalizer invocation."""

    ctx: contextvars.Context
    code: int
    request: Request


@pytest.fixture
def finalizer_calls() -> List[FinalizerCall]:
    return []


@pytest.fixture
def recording_finalizer(finalizer_calls):
    """Synchronous finalizer that records its arguments."""

    def _finalizer(ctx, code, request):
        finalizer_calls.append(FinalizerCall(ctx, code, request))

    return _finalizer


@pytest.fixture
def demo_app():
    """A fresh demo FastAPI app; tests may add routes before the first request."""
    from finalizer.main import create_app

    return create_app()


@pytest_asyncio.fixture
async def test_client(demo_app):
    """
    HTTPX AsyncClient talking to the demo app.

    raise_app_exceptions=False so that failing routes come back as 500
    responses instead of re-raising inside the test.
    """
    transport = ASGITransport(app=demo_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
