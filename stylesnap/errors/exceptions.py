"""Custom exceptions for error handling"""
from enum import Enum

from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    """Closed set of failure categories carried by every error response"""
    VALIDATION = "validation"
    UPSTREAM = "upstream"
    VERIFICATION = "verification"
    BOOKKEEPING = "bookkeeping"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


class BaseHTTPException(HTTPException):
    """Base exception class for all custom HTTP exceptions"""
    kind = ErrorKind.INTERNAL
    response_status = "failed"
    code = None

    def __init__(self, detail: str = None, headers: dict = None, data: dict = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.detail,
            headers=headers
        )
        self.data = data


class BadRequestException(BaseHTTPException):
    """400 Bad Request"""
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Bad request"
    kind = ErrorKind.VALIDATION


class ValidationException(BadRequestException):
    """400 Missing or invalid input"""
    detail = "Validation error"


class InvalidTrialIdException(ValidationException):
    """400 Missing or invalid trial identity"""
    detail = "Missing or invalid trialId"


class FileUploadException(BadRequestException):
    """File upload failed"""
    detail = "File upload failed"


class FileTooLargeException(BaseHTTPException):
    """413 Payload Too Large"""
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    detail = "File too large"
    kind = ErrorKind.VALIDATION


class PaymentRequiredException(BaseHTTPException):
    """402 Free generation used and no paid credits left"""
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    detail = "Free trial ended. Please pay to generate more images."
    kind = ErrorKind.VALIDATION
    response_status = "need_payment"


class FreeLimitReachedException(PaymentRequiredException):
    """402 Global daily free quota exhausted"""
    detail = "Today's free image quota has been reached. You can still generate images for ₹9 each."
    response_status = "free_limit_reached"


class NotFoundException(BaseHTTPException):
    """404 Not Found"""
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"
    kind = ErrorKind.NOT_FOUND
    response_status = "not_found"


class TrialNotFoundException(NotFoundException):
    """404 Unknown trial identity"""
    detail = "Trial not found"


class VerificationFailedException(BaseHTTPException):
    """400 Payment signature mismatch"""
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Payment verification failed"
    kind = ErrorKind.VERIFICATION


class InternalServerException(BaseHTTPException):
    """500 Internal Server Error"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Internal server error"


class ServerMisconfiguredException(InternalServerException):
    """A required secret or key is not configured"""
    detail = "Server is not configured for this operation"


class BookkeepingException(InternalServerException):
    """Money moved but the entitlement could not be recorded"""
    detail = "Payment succeeded, but failed to update credits. Please contact support."
    kind = ErrorKind.BOOKKEEPING


class UpstreamServiceException(BaseHTTPException):
    """502 A collaborator (gateway, generator) failed"""
    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "Upstream service failed"
    kind = ErrorKind.UPSTREAM


class PaymentGatewayException(UpstreamServiceException):
    """Payment gateway call failed"""
    detail = "Payment gateway error"


class ImageGenerationException(UpstreamServiceException):
    """Image generation backend failed"""
    detail = "Failed to generate image"
