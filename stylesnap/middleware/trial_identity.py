"""Edge identity seeder: gives every first-time page visitor a trial identity"""
import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from stylesnap.db import session
from stylesnap.services.trial_service import generate_trial_id, register_trial
from stylesnap.utils.logger import log_trial_event
from stylesnap.utils.request_info import get_client_ip, get_user_agent
from stylesnap.utils.trial_cookie import read_trial_cookie, set_trial_cookie

logger = logging.getLogger(__name__)

EXCLUDED_PREFIXES = (
    "/api/",
    "/static/",
    "/uploads/",
    "/generated/",
    "/docs",
    "/redoc",
    "/openapi.json",
)
EXCLUDED_PATHS = {"/favicon.ico", "/robots.txt"}


def is_page_request(path: str) -> bool:
    if path in EXCLUDED_PATHS:
        return False
    return not path.startswith(EXCLUDED_PREFIXES)


class TrialIdentityMiddleware(BaseHTTPMiddleware):
    """
    Seeds a trial identity on page requests without a `trialId` cookie.

    The server row is inserted best-effort: an insert failure is logged and
    the cookie is still set, so the page always renders.
    """

    async def dispatch(self, request: Request, call_next):
        if not is_page_request(request.url.path) or read_trial_cookie(request):
            return await call_next(request)

        trial_id = generate_trial_id()
        client_ip = get_client_ip(request)

        db = session.SessionLocal()
        try:
            register_trial(db, trial_id, ip_address=client_ip, user_agent=get_user_agent(request))
            log_trial_event("SEEDED", trial_id=trial_id, client_ip=client_ip)
        except Exception as e:
            db.rollback()
            log_trial_event("SEED", trial_id=trial_id, client_ip=client_ip, error=str(e))
        finally:
            db.close()

        response = await call_next(request)
        set_trial_cookie(response, trial_id)
        return response
