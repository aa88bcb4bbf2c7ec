"""Image generation endpoint"""
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from stylesnap.core.dependencies import get_db
from stylesnap.schemas.generation_schemas import GenerateRequest
from stylesnap.services.generation_service import ImageGenerator, get_image_generator, generate_styled_image
from stylesnap.utils.request_info import get_client_ip, get_user_agent
from stylesnap.errors import SuccessCode, success_response

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("")
async def generate_image(
    body: GenerateRequest,
    request: Request,
    db: Session = Depends(get_db),
    generator: ImageGenerator = Depends(get_image_generator)
):
    """
    ## Generate a stylized image

    Consumes the free generation first, then one paid credit per call.

    - HTTP 402 `need_payment`: free generation used and no paid credits
    - HTTP 402 `free_limit_reached`: today's free quota is exhausted
    - HTTP 502: the image backend failed; the credit is refunded
    """
    result = await generate_styled_image(
        db,
        generator,
        body,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request)
    )
    return success_response(SuccessCode.IMAGE_GENERATED, data=result.model_dump(by_alias=True))
