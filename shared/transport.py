"""
ASGI middleware bounding how long a request may take to arrive and its
response to leave.

uvicorn only exposes a keep-alive (idle) timeout, so the read and write
deadlines are enforced at the ASGI layer: reading the request body must
finish within ``read_timeout`` of the request starting, and every response
message must be handed to the server within ``write_timeout`` of it.
"""

import asyncio

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from shared.logging import get_logger


class TransportTimeoutMiddleware:
    """Read/write deadlines per HTTP request."""

    def __init__(self, app: ASGIApp, read_timeout: float = 15.0, write_timeout: float = 15.0):
        self.app = app
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self.logger = get_logger("shared.transport")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        loop = asyncio.get_running_loop()
        started = loop.time()
        read_deadline = started + self.read_timeout
        write_deadline = started + self.write_timeout
        body_complete = False

        async def timed_receive() -> Message:
            nonlocal body_complete
            # Once the body is in, receive() only waits for a disconnect
            if body_complete:
                return await receive()
            message = await asyncio.wait_for(receive(), max(read_deadline - loop.time(), 0))
            if message["type"] != "http.request" or not message.get("more_body", False):
                body_complete = True
            return message

        async def timed_send(message: Message) -> None:
            await asyncio.wait_for(send(message), max(write_deadline - loop.time(), 0))

        try:
            await self.app(scope, timed_receive, timed_send)
        except asyncio.TimeoutError:
            self.logger.warning(
                "Transport deadline exceeded",
                path=scope.get("path"),
                elapsed_ms=round((loop.time() - started) * 1000, 2),
            )
