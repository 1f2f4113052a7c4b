import logging

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


def create_response(data=None, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Return a JSON body as-is; clients depend on the flat field names."""
    return JSONResponse(status_code=status_code, content=jsonable_encoder(data))


def error_response(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def handle_exception(error: Exception, fallback_message: str = "Internal server error") -> JSONResponse:
    """Coerce raised errors into the shared ``{"error": ...}`` structure."""
    if isinstance(error, HTTPException):
        detail = error.detail if isinstance(error.detail, str) else str(error.detail)
        return error_response(detail, error.status_code)

    logger.exception("%s: %s", fallback_message, error)
    return error_response(fallback_message, status.HTTP_500_INTERNAL_SERVER_ERROR)
