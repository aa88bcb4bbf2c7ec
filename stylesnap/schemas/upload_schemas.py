"""Schemas for temporary uploads"""
from pydantic import BaseModel, Field


class UploadResult(BaseModel):
    image_url: str = Field(..., serialization_alias="imageUrl")
    file_name: str = Field(..., serialization_alias="fileName")
    expires_in: int = Field(..., serialization_alias="expiresIn", description="Seconds until automatic deletion")
