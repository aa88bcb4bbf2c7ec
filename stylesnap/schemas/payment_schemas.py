"""Payment Pydantic schemas."""
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional


class OrderCreateRequest(BaseModel):
    """Body sent by the client to open a checkout."""
    amount: Optional[int] = Field(None, gt=0, description="Amount in paise; must match the server price (₹9)")
    currency: Optional[str] = Field(None, min_length=3, max_length=3, description="ISO currency; must match the server currency (INR)")
    trial_id: Optional[str] = Field(None, alias="trialId", description="Trial identity to credit")

    class Config:
        populate_by_name = True


class OrderHandle(BaseModel):
    """Opaque order handle the hosted checkout needs."""
    id: str
    amount: int
    currency: str
    receipt: Optional[str] = None
    key_id: Optional[str] = Field(None, serialization_alias="keyId")


class PaymentVerifyRequest(BaseModel):
    """
    Confirmation delivered by the hosted checkout after payment:
      {razorpay_order_id, razorpay_payment_id, razorpay_signature}
    """
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    trial_id: Optional[str] = Field(None, alias="trialId")

    class Config:
        populate_by_name = True
        extra = "allow"   # accept any extra fields the checkout may add


class PaymentVerifyResult(BaseModel):
    verified: bool
    trial_id: Optional[str] = Field(None, serialization_alias="trialId")
    credits_added: int = Field(0, serialization_alias="creditsAdded")
    paid_credits: Optional[int] = Field(None, serialization_alias="paidCredits")
    already_processed: bool = Field(False, serialization_alias="alreadyProcessed")
