"""
ASGI middleware for request correlation IDs.

Each request gets an ID (incoming X-Correlation-ID or a new UUID) that is put
in the logging context and echoed back in the response headers.
request_finished is logged once the last body chunk has been sent, so for
the caption event stream it covers the whole batch.
"""
import time

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.logging import generate_correlation_id, get_logger, set_correlation_id

logger = get_logger(__name__)


class CorrelationIDMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = Headers(scope=scope).get("X-Correlation-ID") or generate_correlation_id()
        set_correlation_id(correlation_id)

        method = scope["method"]
        path = scope["path"]
        client = scope.get("client")
        start_time = time.time()
        status_code = 500
        logger.info("request_started", method=method, path=path, client_host=client[0] if client else None)

        async def send_with_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message).append("X-Correlation-ID", correlation_id)
            await send(message)

        try:
            await self.app(scope, receive, send_with_id)
        except Exception as e:
            logger.error(
                "request_failed",
                method=method,
                path=path,
                duration_ms=round((time.time() - start_time) * 1000, 2),
                error=str(e),
                exc_info=True,
            )
            raise

        logger.info(
            "request_finished",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
