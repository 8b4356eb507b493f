"""Translation of domain errors into HTTP responses."""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from subway.core.errors import NotFoundError, SubwayError

logger = structlog.get_logger(__name__)


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map unresolved line/station ids to 404."""
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def bad_request_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map rejected requests (ledger rules, station in use) to 400."""
    logger.info("request_rejected", path=request.url.path, error=type(exc).__name__)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain error handlers. The most specific class wins."""
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(SubwayError, bad_request_handler)
