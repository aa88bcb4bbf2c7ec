"""Error handlers for the application"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
import logging

from stylesnap.errors.exceptions import BaseHTTPException, ErrorKind
from stylesnap.errors.response_codes import ErrorCode, ResponseCode, ResponseStatus, error_response

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: BaseHTTPException):
    """
    Render a custom exception into the standard error envelope
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.kind.value} error on {request.url.path}: {exc.detail}")
    else:
        logger.info(f"{exc.kind.value} error on {request.url.path}: {exc.detail}")

    code = ResponseCode(code=exc.code or exc.status_code, message=str(exc.detail), status_code=exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            code=code,
            kind=exc.kind.value,
            response_status=ResponseStatus(exc.response_status),
            data=exc.data,
        ),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle request validation errors as 400 validation failures
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(f"Validation error on {request.url}: {errors}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response(
            code=ErrorCode.INVALID_INPUT,
            message="Validation error",
            errors=errors,
            kind=ErrorKind.VALIDATION.value,
        )
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """
    Handle SQLAlchemy database errors
    """
    logger.error(f"Database error on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(
            code=ErrorCode.DATABASE_ERROR,
            message="An internal database error occurred. Please try again later.",
            kind=ErrorKind.UPSTREAM.value,
        )
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle general exceptions
    """
    logger.error(f"Unhandled exception on {request.url}: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(
            code=ErrorCode.INTERNAL_ERROR,
            message="An unexpected error occurred. Please try again later.",
            kind=ErrorKind.INTERNAL.value,
        )
    )
