"""Trial identity endpoints: registration, lookup, removal and entitlement status"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from stylesnap.core.dependencies import get_db
from stylesnap.schemas.trial_schemas import TrialIdRequest, TrialRecordResponse
from stylesnap.services.trial_service import normalize_trial_id, register_trial, get_trial, delete_trial
from stylesnap.services.entitlement_service import get_entitlement
from stylesnap.utils.request_info import get_client_ip, get_user_agent
from stylesnap.utils.trial_cookie import set_trial_cookie
from stylesnap.errors import (
    TrialNotFoundException,
    SuccessCode,
    ResponseStatus,
    success_response,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _record_payload(trial) -> dict:
    return TrialRecordResponse.model_validate(trial).model_dump(mode="json")


@router.post("")
async def register_trial_identity(
    body: TrialIdRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    ## Register a trial identity (insert-if-absent)

    - New identity: `status=successful`
    - Known identity: `status=already_exists`, entitlement fields untouched

    Both answer 200 and refresh the `trialId` cookie.
    """
    trial_id = normalize_trial_id(body.trial_id)
    trial, created = register_trial(
        db,
        trial_id,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request)
    )

    if created:
        content = success_response(SuccessCode.TRIAL_CREATED, data=_record_payload(trial))
    else:
        content = success_response(
            SuccessCode.TRIAL_EXISTS,
            data=_record_payload(trial),
            response_status=ResponseStatus.ALREADY_EXISTS
        )

    response = JSONResponse(content=content, status_code=200)
    set_trial_cookie(response, trial_id)
    return response


@router.get("")
async def read_trial(
    trial_id: Optional[str] = Query(None, alias="trialId"),
    db: Session = Depends(get_db)
):
    """Raw trial record, 404 `not_found` when the identity has no row"""
    trial_id = normalize_trial_id(trial_id)
    trial = get_trial(db, trial_id)
    if not trial:
        raise TrialNotFoundException()

    response = JSONResponse(content=success_response(SuccessCode.TRIAL_FOUND, data=_record_payload(trial)))
    set_trial_cookie(response, trial_id)
    return response


@router.delete("")
async def remove_trial(
    body: TrialIdRequest,
    db: Session = Depends(get_db)
):
    """Delete a trial record; used by reconciliation to drop a losing identity"""
    trial_id = normalize_trial_id(body.trial_id)
    if not delete_trial(db, trial_id):
        raise TrialNotFoundException()
    return success_response(SuccessCode.TRIAL_DELETED, data={"trialId": trial_id})


@router.get("/status")
async def trial_status(
    request: Request,
    trial_id: Optional[str] = Query(None, alias="trialId"),
    db: Session = Depends(get_db)
):
    """
    ## Entitlement for a trial identity

    Unknown identities read as fresh (`hasUsedFreeTrial=false`,
    `paidCredits=0`, `registered=false`).
    """
    trial_id = normalize_trial_id(trial_id)
    entitlement = get_entitlement(db, trial_id, touch=True)

    response = JSONResponse(content=success_response(
        SuccessCode.OK,
        data=entitlement.model_dump(by_alias=True, mode="json")
    ))
    set_trial_cookie(response, trial_id)
    return response
