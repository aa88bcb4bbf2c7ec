"""
HTTP Response Codes and Messages
Centralized response handling for consistent API responses
"""
from enum import Enum
from typing import Any, Dict, Optional
from fastapi import status


class ResponseStatus(str, Enum):
    """Status enum returned in every API envelope"""
    SUCCESSFUL = "successful"
    FAILED = "failed"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    NEED_PAYMENT = "need_payment"
    FREE_LIMIT_REACHED = "free_limit_reached"


class ResponseCode:
    """HTTP Response Code Container"""
    def __init__(self, code: int, message: str, status_code: int):
        self.code = code
        self.message = message
        self.status_code = status_code


class SuccessCode:
    """Success Response Codes (2xx)"""

    OK = ResponseCode(
        code=200,
        message="Request processed successfully",
        status_code=status.HTTP_200_OK
    )

    TRIAL_FOUND = ResponseCode(
        code=2001,
        message="Trial found",
        status_code=status.HTTP_200_OK
    )

    TRIAL_CREATED = ResponseCode(
        code=2011,
        message="Trial created successfully",
        status_code=status.HTTP_200_OK
    )

    TRIAL_EXISTS = ResponseCode(
        code=2012,
        message="Trial already exists",
        status_code=status.HTTP_200_OK
    )

    TRIAL_DELETED = ResponseCode(
        code=2003,
        message="Trial deleted successfully",
        status_code=status.HTTP_200_OK
    )

    ORDER_CREATED = ResponseCode(
        code=2013,
        message="Order created",
        status_code=status.HTTP_201_CREATED
    )

    PAYMENT_VERIFIED = ResponseCode(
        code=2004,
        message="Payment verified and credits added",
        status_code=status.HTTP_200_OK
    )

    IMAGE_GENERATED = ResponseCode(
        code=2005,
        message="Image generated successfully",
        status_code=status.HTTP_200_OK
    )

    FILE_UPLOADED = ResponseCode(
        code=2014,
        message="File will be deleted automatically after 30 minutes.",
        status_code=status.HTTP_200_OK
    )

    FILE_DELETED = ResponseCode(
        code=2006,
        message="File deleted successfully",
        status_code=status.HTTP_200_OK
    )


class ErrorCode:
    """Error Response Codes (4xx, 5xx)"""

    INVALID_INPUT = ResponseCode(
        code=4001,
        message="Invalid input provided",
        status_code=status.HTTP_400_BAD_REQUEST
    )

    INTERNAL_ERROR = ResponseCode(
        code=500,
        message="Internal server error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )

    DATABASE_ERROR = ResponseCode(
        code=5001,
        message="Database operation failed",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def success_response(
    code: ResponseCode = SuccessCode.OK,
    data: Any = None,
    message: Optional[str] = None,
    response_status: ResponseStatus = ResponseStatus.SUCCESSFUL,
) -> Dict[str, Any]:
    """
    Create a standardized success response

    Args:
        code: ResponseCode object
        data: Response data
        message: Optional custom message
        response_status: Status enum value reported to the caller

    Returns:
        Standardized response dictionary
    """
    return {
        "success": True,
        "code": code.code,
        "status": ResponseStatus(response_status).value,
        "statusCode": code.status_code,
        "message": message or code.message,
        "data": data
    }


def error_response(
    code: ResponseCode = ErrorCode.INTERNAL_ERROR,
    message: Optional[str] = None,
    errors: Optional[Any] = None,
    kind: str = "internal",
    response_status: ResponseStatus = ResponseStatus.FAILED,
    status_code: Optional[int] = None,
    data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Create a standardized error response

    Args:
        code: ResponseCode object
        message: Optional custom message
        errors: Optional detailed error information
        kind: Error kind (validation, upstream, verification, bookkeeping, ...)
        response_status: Status enum value reported to the caller
        status_code: HTTP status when it differs from code.status_code
        data: Optional payload still useful to the caller

    Returns:
        Standardized error response dictionary
    """
    response = {
        "success": False,
        "code": code.code,
        "status": ResponseStatus(response_status).value,
        "kind": kind,
        "statusCode": status_code or code.status_code,
        "message": message or code.message
    }

    if errors:
        response["errors"] = errors
    if data is not None:
        response["data"] = data

    return response
