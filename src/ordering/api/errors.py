"""Maps ordering errors to HTTP responses.

Every error body has the same shape: ``{"error": {"kind", "message", "context"}}``.
The status code is chosen from the error kind, never from the message.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError
from protean.exceptions import ValidationError as ProteanValidationError

from ordering.errors import ErrorKind, OrderingError

logger = structlog.get_logger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.INVALID_STATUS: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.INELIGIBLE_STATE: 409,
    ErrorKind.WRONG_STATE: 409,
    ErrorKind.ILLEGAL_TRANSITION: 409,
    ErrorKind.ALREADY_PROCESSED: 409,
    ErrorKind.NO_OP: 409,
    ErrorKind.WINDOW_EXPIRED: 409,
    ErrorKind.INSUFFICIENT_STOCK: 409,
    ErrorKind.INTERNAL: 500,
}


def error_response(kind: ErrorKind, message: str, context: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_KIND[kind],
        content={"error": {"kind": kind.value, "message": message, "context": context or {}}},
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(OrderingError)
    async def ordering_error_handler(request: Request, exc: OrderingError):
        body = exc.to_dict()
        if exc.kind == ErrorKind.INTERNAL:
            logger.error("Ordering request failed", path=request.url.path, error=exc.message, context=body["context"])
        return error_response(exc.kind, body["message"], body["context"])

    @app.exception_handler(ProteanValidationError)
    async def protean_validation_handler(request: Request, exc: ProteanValidationError):
        return error_response(ErrorKind.VALIDATION, "Invalid input", {"errors": exc.messages})

    @app.exception_handler(ObjectNotFoundError)
    async def not_found_handler(request: Request, exc: ObjectNotFoundError):
        return error_response(ErrorKind.NOT_FOUND, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
        return error_response(ErrorKind.VALIDATION, "Invalid request", {"errors": errors})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path, error=str(exc))
        return error_response(ErrorKind.INTERNAL, "Internal server error")
