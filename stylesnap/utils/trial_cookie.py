"""Trial identity cookie helpers"""
from typing import Optional

from starlette.requests import Request
from starlette.responses import Response

from stylesnap.core.config import settings


def read_trial_cookie(request: Request) -> Optional[str]:
    value = request.cookies.get(settings.TRIAL_COOKIE_NAME)
    if value and value.strip():
        return value.strip()
    return None


def set_trial_cookie(response: Response, trial_id: str) -> None:
    """httpOnly, SameSite=Strict, one year, whole site"""
    response.set_cookie(
        key=settings.TRIAL_COOKIE_NAME,
        value=trial_id,
        max_age=settings.TRIAL_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
    )
