"""Temporary upload endpoints"""
import logging
from typing import Optional

from fastapi import APIRouter, File, Query, UploadFile

from stylesnap.core.config import settings
from stylesnap.schemas.upload_schemas import UploadResult
from stylesnap.utils.file_storage import (
    IMAGE_EXTENSIONS,
    detect_image_type,
    save_uploaded_file,
    schedule_file_deletion,
    delete_upload_by_name,
)
from stylesnap.errors import (
    FileUploadException,
    FileTooLargeException,
    SuccessCode,
    success_response,
)

router = APIRouter()
logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
}


@router.post("")
async def upload_image(file: UploadFile = File(...)):
    """
    ## Upload a source image

    Accepts jpeg, png, gif, webp and bmp. The file is served from
    `/uploads/<name>` and deleted automatically after 30 minutes.
    """
    declared = ALLOWED_CONTENT_TYPES.get((file.content_type or "").lower())
    if declared is None:
        raise FileUploadException(detail="Only image files are allowed (jpeg, png, gif, webp, bmp)")

    content = await file.read()
    if not content:
        raise FileUploadException(detail="Empty file")

    max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if len(content) > max_bytes:
        raise FileTooLargeException(detail=f"File exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit")

    # Trust the bytes over the declared type when they disagree
    image_type = detect_image_type(content) or declared
    image_url, file_path = save_uploaded_file(content, file.filename or "image", IMAGE_EXTENSIONS[image_type])
    schedule_file_deletion(file_path)

    logger.info(f"Upload stored at {file_path}, deletion in {settings.UPLOAD_TTL_SECONDS}s")
    result = UploadResult(image_url=image_url, file_name=file_path.name, expires_in=settings.UPLOAD_TTL_SECONDS)
    return success_response(SuccessCode.FILE_UPLOADED, data=result.model_dump(by_alias=True))


@router.delete("")
async def delete_upload(file_name: Optional[str] = Query(None, alias="fileName")):
    """Delete an upload before its timer fires"""
    deleted = delete_upload_by_name(file_name)
    return success_response(SuccessCode.FILE_DELETED, data={"fileName": deleted})
