"""Schemas for style catalog and image generation"""
from pydantic import BaseModel, Field
from typing import Optional


class StyleResponse(BaseModel):
    id: str
    title: str
    category: str
    image_url: str = Field(..., serialization_alias="imageUrl")
    style_prompt: str = Field(..., serialization_alias="stylePrompt")


class GenerateRequest(BaseModel):
    """Generation request from the upload page"""
    trial_id: Optional[str] = Field(None, alias="trialId")
    image_url: Optional[str] = Field(None, alias="imageUrl", description="Public path returned by /upload")
    style_id: Optional[str] = Field(None, alias="styleId", description="Catalog style id")
    prompt: Optional[str] = Field(None, description="Explicit prompt; overrides the style prompt")
    style_image_url: Optional[str] = Field(None, alias="styleImageUrl", description="Optional style reference image")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "trialId": "550e8400-e29b-41d4-a716-446655440000",
                "imageUrl": "/uploads/20260101_120000_ab12cd34_selfie.jpg",
                "styleId": "ghibli-art"
            }
        }


class GenerateResult(BaseModel):
    image_url: str = Field(..., serialization_alias="imageUrl")
    entitlement_used: str = Field(..., serialization_alias="entitlementUsed", description="'free' or 'paid'")
    free_used: bool = Field(..., serialization_alias="hasUsedFreeTrial")
    paid_credits: int = Field(..., serialization_alias="paidCredits")
