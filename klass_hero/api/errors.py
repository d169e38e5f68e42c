"""
HTTP rendering of service failures.

Routes unwrap ServiceResults with `result_or_raise`; failures become
ApiError, rendered as {"error": {...}} with a status chosen by error code.
"""

from typing import Any, Dict, Optional, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from klass_hero.core.exceptions import BaseAppException, ErrorCode
from klass_hero.core.logging import get_logger
from klass_hero.services.base.service_result import ServiceError, ServiceResult

logger = get_logger(__name__)

T = TypeVar("T")

STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.INVALID_PAYMENT_METHOD: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.CHILD_NOT_SELECTED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.PARTICIPANT_INELIGIBLE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.NO_PARENT_PROFILE: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_ENROLLMENT: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_RECORD_STATUS: status.HTTP_409_CONFLICT,
    ErrorCode.INSUFFICIENT_PERMISSIONS: status.HTTP_403_FORBIDDEN,
    ErrorCode.BOOKING_LIMIT_EXCEEDED: status.HTTP_403_FORBIDDEN,
    ErrorCode.REGISTRATION_NOT_OPEN: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NO_SPOTS_AVAILABLE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DATABASE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ApiError(Exception):
    """A service failure on its way to the client."""

    def __init__(self, error: ServiceError):
        self.error = error
        self.status_code = STATUS_BY_CODE.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        super().__init__(error.message)


def result_or_raise(result: ServiceResult[T]) -> T:
    if result.is_success:
        return result.data
    raise ApiError(result.error)


def error_body(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    field: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": jsonable_encoder(details) if details else None,
            "field": field,
        }
    }


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    error = exc.error
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(error.code.value, error.message, error.details, error.field),
    )


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(exc.error_code, exc.status_code),
        content=error_body(exc.error_code.value, exc.message, exc.details),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(
            ErrorCode.VALIDATION_ERROR.value,
            "Request validation failed",
            {"errors": exc.errors()},
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(ErrorCode.INTERNAL_ERROR.value, "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
