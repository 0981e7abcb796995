"""
Finalizer: Response Interceptor
=================================

What:  An ASGI `send` wrapper that records the status code, the response
       headers and the number of body bytes, without altering anything.
Why:   ASGI responses are only visible as messages on `send`. Watching those
       messages is the one place that sees every status and every byte, no
       matter which response class (or raw ASGI code) produced them.
How:   `InterceptingSend` is itself an ASGI `send` callable. It forwards each
       message to the real `send` and updates its counters:

       http.response.start  → status_code, raw_headers   (recorded, then sent)
       http.response.body   → written += len(body)        (sent, then counted)
       anything else        → forwarded, not observed

A completed `await send(...)` means the server accepted the whole body. If
`send` raises (client gone, connection reset) no bytes are counted and the
exception reaches the caller as the very same object.
"""

from typing import List, Tuple

from starlette.datastructures import Headers
from starlette.status import HTTP_200_OK
from starlette.types import Message, Send

# Status reported when the application never starts a response.
DEFAULT_STATUS_CODE = HTTP_200_OK


class InterceptingSend:
    """
    Observes one response's worth of ASGI messages.

    One instance per request; never shared across requests.

    Attributes:
        status_code:  Last status sent via http.response.start, else 200
        written:      Sum of body bytes accepted by the wrapped send
        raw_headers:  Header pairs of the last http.response.start
    """

    def __init__(self, send: Send) -> None:
        self._send = send
        self.status_code: int = DEFAULT_STATUS_CODE
        self.written: int = 0
        self.raw_headers: List[Tuple[bytes, bytes]] = []

    async def __call__(self, message: Message) -> None:
        message_type = message["type"]
        if message_type == "http.response.start":
            await self.start_response(message)
        elif message_type == "http.response.body":
            await self.write(message)
        else:
            await self._send(message)

    async def start_response(self, message: Message) -> None:
        # Last call wins.
        self.status_code = message["status"]
        self.raw_headers = [(k, v) for k, v in message.get("headers", [])]
        await self._send(message)

    async def write(self, message: Message) -> None:
        await self._send(message)
        self.written += len(message.get("body", b""))

    @property
    def headers(self) -> Headers:
        """Immutable snapshot of the headers sent so far."""
        return Headers(raw=list(self.raw_headers))
