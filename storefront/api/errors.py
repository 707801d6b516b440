import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.domain.errors import StorefrontError, TooManyRequestsError, error_payload

logger = logging.getLogger(__name__)


def storefront_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map the domain error hierarchy onto JSON responses."""
    assert isinstance(exc, StorefrontError)

    if not exc.operational:
        # Detail was logged where it happened; the client gets a generic body
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.kind.value)

    headers: dict[str, str] = {}
    if isinstance(exc, TooManyRequestsError):
        headers["Retry-After"] = str(exc.retry_after_seconds)

    return JSONResponse(status_code=exc.status_code, content=error_payload(exc), headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
