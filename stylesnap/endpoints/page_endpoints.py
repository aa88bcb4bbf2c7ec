"""Page routes; the edge middleware seeds the trial identity on these"""
from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from stylesnap.core.config import settings

router = APIRouter()

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>{title}</title></head>
<body><main id="app" data-page="{page}"></main></body>
</html>
"""


@router.get("/", response_class=HTMLResponse)
async def home_page():
    return HTMLResponse(_PAGE.format(title=settings.PROJECT_NAME, page="home"))


@router.get("/upload", response_class=HTMLResponse)
async def upload_page():
    return HTMLResponse(_PAGE.format(title=f"{settings.PROJECT_NAME} - Upload", page="upload"))
