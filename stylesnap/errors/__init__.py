"""Error handling module"""
from stylesnap.errors.exceptions import (
    ErrorKind,
    BaseHTTPException,
    BadRequestException,
    ValidationException,
    InvalidTrialIdException,
    FileUploadException,
    FileTooLargeException,
    PaymentRequiredException,
    FreeLimitReachedException,
    NotFoundException,
    TrialNotFoundException,
    VerificationFailedException,
    InternalServerException,
    ServerMisconfiguredException,
    BookkeepingException,
    UpstreamServiceException,
    PaymentGatewayException,
    ImageGenerationException
)
from stylesnap.errors.response_codes import (
    ResponseStatus,
    SuccessCode,
    ErrorCode,
    success_response,
    error_response
)

__all__ = [
    "ErrorKind",
    "BaseHTTPException",
    "BadRequestException",
    "ValidationException",
    "InvalidTrialIdException",
    "FileUploadException",
    "FileTooLargeException",
    "PaymentRequiredException",
    "FreeLimitReachedException",
    "NotFoundException",
    "TrialNotFoundException",
    "VerificationFailedException",
    "InternalServerException",
    "ServerMisconfiguredException",
    "BookkeepingException",
    "UpstreamServiceException",
    "PaymentGatewayException",
    "ImageGenerationException",
    "ResponseStatus",
    "SuccessCode",
    "ErrorCode",
    "success_response",
    "error_response"
]
