"""
HTTP mapping for domain errors.

The core only raises DomainError kinds; this module is where a FastAPI
caller turns them into status codes.
"""

from typing import Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.middleware.request_id import REQUEST_ID_HEADER
from src.kernel.errors import DomainError, ErrorKind, ValidationFailedError
from src.logging_config import get_logger

logger = get_logger(__name__)

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_ALLOWED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_MEMBER: status.HTTP_403_FORBIDDEN,
    ErrorKind.CANNOT_PERFORM: status.HTTP_400_BAD_REQUEST,
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render a DomainError as {"detail", "code", "errors"}."""
    status_code = STATUS_BY_KIND[exc.kind]
    errors = exc.errors if isinstance(exc, ValidationFailedError) else []
    logger.info(
        "Domain error",
        extra={"path": request.url.path, "code": exc.kind.value, "status_code": status_code},
    )

    headers = {}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        headers[REQUEST_ID_HEADER] = req_id

    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.kind.value, "errors": errors},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
