from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from eventhub.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
    ValidationError,
)

VALIDATION_ERROR_CODE = "VALIDATION_ERROR"


def status_for_service_error(err: ServiceError) -> int:
    if isinstance(err, NotFoundError):
        return 404
    if isinstance(err, PermissionDeniedError):
        return 403
    if isinstance(err, ConflictError):
        return 409
    if isinstance(err, ValidationError):
        return 400
    return 500


def http_error_from_service(err: ServiceError) -> HTTPException:
    return HTTPException(
        status_code=status_for_service_error(err),
        detail={"code": err.code, "message": err.message},
    )


def _describe(errors: list[dict]) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "invalid request"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "code": VALIDATION_ERROR_CODE,
                "message": _describe(errors),
                "errors": jsonable_encoder(errors),
            }
        },
    )
