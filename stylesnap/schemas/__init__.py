"""Pydantic schemas for request/response validation"""
from stylesnap.schemas.trial_schemas import (
    TrialIdRequest,
    TrialRecordResponse,
    Entitlement
)
from stylesnap.schemas.payment_schemas import (
    OrderCreateRequest,
    OrderHandle,
    PaymentVerifyRequest,
    PaymentVerifyResult
)
from stylesnap.schemas.generation_schemas import (
    StyleResponse,
    GenerateRequest,
    GenerateResult
)
from stylesnap.schemas.upload_schemas import UploadResult

__all__ = [
    "TrialIdRequest",
    "TrialRecordResponse",
    "Entitlement",
    "OrderCreateRequest",
    "OrderHandle",
    "PaymentVerifyRequest",
    "PaymentVerifyResult",
    "StyleResponse",
    "GenerateRequest",
    "GenerateResult",
    "UploadResult"
]
