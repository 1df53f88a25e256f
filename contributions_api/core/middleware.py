from collections.abc import Awaitable
from collections.abc import Callable
from time import perf_counter

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response


def client_ip(request: Request) -> str:
    # Reverse proxies usually set X-Forwarded-For.
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip() or "unknown"

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log one line per request; failed requests are logged as warnings."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # Unhandled errors are rendered by the outer server error handler.
            self._log(request, 500, started)
            raise

        self._log(request, response.status_code, started)
        return response

    @staticmethod
    def _log(request: Request, status_code: int, started: float) -> None:
        elapsed_ms = (perf_counter() - started) * 1000

        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"

        logger.bind(access=True).log(
            "WARNING" if status_code >= 400 else "INFO",
            '{} "{} {}" {} {:.1f}ms',
            client_ip(request),
            request.method,
            path,
            status_code,
            elapsed_ms,
        )
