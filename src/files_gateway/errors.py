"""Error taxonomy for the gateway and the FastAPI handlers that render it."""

import logging
from typing import Dict, Optional

import pydantic
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Base class for every failure the gateway reports to its callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def kind(self) -> str:
        return type(self).__name__


class InvalidInput(GatewayError):
    """Malformed request: empty path, missing payload, bad length."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(GatewayError):
    """No object exists at the requested path."""

    status_code = status.HTTP_404_NOT_FOUND


class StorageUnavailable(GatewayError):
    """Backend unreachable, timed out, or otherwise failed."""

    status_code = status.HTTP_502_BAD_GATEWAY


class StorageDenied(GatewayError):
    """Backend rejected the credentials or the operation."""

    status_code = status.HTTP_403_FORBIDDEN


class PartialWrite(GatewayError):
    """Payload stream ended before (or ran past) its declared length."""

    status_code = status.HTTP_400_BAD_REQUEST


async def handle_gateway_errors(request: Request, exc: GatewayError) -> JSONResponse:
    """Map a :class:`GatewayError` onto its HTTP status."""
    logger.warning(f"{request.method} {request.url.path} failed with {exc.kind}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.kind,
            "message": exc.message,
            "details": exc.details,
        },
    )


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "ValidationError",
            "detail": [
                {
                    "msg": error["msg"],
                    "loc": list(error.get("loc", ())),
                }
                for error in errors
            ],
        },
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Turn anything unexpected into a 500 and log the traceback."""
    try:
        return await call_next(request)
    except Exception as err:  # pylint: disable=broad-except
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {err}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "InternalServerError", "message": "Internal server error"},
        )
