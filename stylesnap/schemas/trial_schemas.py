"""Schemas for trial identity and entitlement"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class TrialIdRequest(BaseModel):
    """Body carrying a trial identity (register / delete)"""
    trial_id: Optional[str] = Field(None, alias="trialId", description="Opaque trial identifier (UUID)")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "trialId": "550e8400-e29b-41d4-a716-446655440000"
            }
        }


class TrialRecordResponse(BaseModel):
    """Server-side trial row"""
    id: str
    ip: Optional[str] = None
    last_ip: Optional[str] = None
    user_metadata: Optional[Dict[str, Any]] = None
    free_used: bool
    paid_credits: int
    created_at: Optional[datetime] = None
    last_seen: Optional[datetime] = None

    class Config:
        from_attributes = True


class Entitlement(BaseModel):
    """What a trial identity may do right now"""
    trial_id: str = Field(..., serialization_alias="trialId")
    registered: bool = Field(..., description="False when the identity has no server row yet")
    free_used: bool = Field(..., serialization_alias="hasUsedFreeTrial")
    paid_credits: int = Field(..., serialization_alias="paidCredits")
    has_paid_credits: bool = Field(..., serialization_alias="isPaidUser")
    can_generate: bool = Field(..., serialization_alias="canGenerate")

    class Config:
        json_schema_extra = {
            "example": {
                "trialId": "550e8400-e29b-41d4-a716-446655440000",
                "registered": True,
                "hasUsedFreeTrial": True,
                "paidCredits": 0,
                "isPaidUser": False,
                "canGenerate": False
            }
        }
