"""Access logging middleware using structlog."""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)


def client_addresses(request: Request) -> tuple[str, str | None]:
    """
    Return the direct client address and the first X-Forwarded-For hop.

    Both are logged; which one to trust depends on the proxy in front of the app.
    """
    client_ip = request.client.host if request.client else "unknown"
    forwarded_for = None
    if xff_header := request.headers.get("x-forwarded-for"):
        forwarded_for = xff_header.split(",")[0].strip()
    return client_ip, forwarded_for


def route_template(request: Request) -> str | None:
    """
    Return the matched path template, e.g. ``/api/v1/lines/{line_id}``.

    Depending on the FastAPI version, a route included under a router prefix
    reports either the full template or only its own part (``/lines/{line_id}``).
    The missing leading segments are taken from the request path.

    Returns:
        The template, or None when no route matched
    """
    route_path = getattr(request.scope.get("route"), "path", None)
    if not route_path:
        return None

    depth = route_path.rstrip("/").count("/")
    segments = request.url.path.rstrip("/").split("/")
    prefix = "/".join(segments[: max(len(segments) - depth, 1)])
    return prefix + route_path


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one structured ``http_request`` event per request.

    Log fields:
        - method, path, status_code, duration_ms, client_ip
        - route: matched path template (``/api/v1/lines/{line_id}``), so
          requests for different lines group together
        - forwarded_for: only when the request came through a proxy
        - trace_id/span_id: added by the logging pipeline
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request and log access information."""
        started = time.perf_counter()
        client_ip, forwarded_for = client_addresses(request)

        response = await call_next(request)

        event: dict[str, str | int | float] = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            "client_ip": client_ip,
        }
        if template := route_template(request):
            event["route"] = template
        if forwarded_for:
            event["forwarded_for"] = forwarded_for

        logger.info("http_request", **event)
        return response
