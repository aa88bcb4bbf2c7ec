"""Style catalog endpoint"""
from fastapi import APIRouter

from stylesnap.schemas.generation_schemas import StyleResponse
from stylesnap.styles import STYLES
from stylesnap.errors import success_response

router = APIRouter()


@router.get("")
async def list_styles():
    styles = [
        StyleResponse(
            id=style.id,
            title=style.title,
            category=style.category,
            image_url=style.image_url,
            style_prompt=style.style_prompt,
        ).model_dump(by_alias=True)
        for style in STYLES
    ]
    return success_response(data=styles)
