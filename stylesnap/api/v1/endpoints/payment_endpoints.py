"""Payment API endpoints: Razorpay orders and checkout verification."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from stylesnap.core.dependencies import get_db
from stylesnap.schemas.payment_schemas import OrderCreateRequest, PaymentVerifyRequest
from stylesnap.services.payment_service import (
    RazorpayClient,
    create_order,
    get_payment_gateway,
    verify_payment,
)
from stylesnap.errors import SuccessCode, success_response

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/order", status_code=201)
async def create_payment_order(
    body: OrderCreateRequest,
    db: Session = Depends(get_db),
    gateway: RazorpayClient = Depends(get_payment_gateway),
):
    """
    ## Create a Razorpay order for one credit pack

    ### Fields (JSON body)
    | Field    | Type   | Required | Description                         |
    |----------|--------|----------|-------------------------------------|
    | trialId  | string | ✔        | Trial identity the credits go to    |
    | amount   | int    |          | Paise, defaults to 900 (₹9)         |
    | currency | string |          | Defaults to INR                     |

    The response carries the order handle (`id`, `amount`, `currency`) and
    the public `keyId` the hosted checkout needs.

    - HTTP 502 → Razorpay rejected or could not be reached.
    """
    order = await create_order(db, gateway, body)
    return JSONResponse(
        status_code=201,
        content=success_response(SuccessCode.ORDER_CREATED, data=order.model_dump(by_alias=True)),
    )


@router.post("/verify")
async def verify_checkout_payment(
    body: PaymentVerifyRequest,
    db: Session = Depends(get_db),
):
    """
    ## Verify the hosted checkout's confirmation and grant credits

    Body: `razorpay_order_id`, `razorpay_payment_id`, `razorpay_signature`
    (and optionally `trialId` for orders created elsewhere).

    - HTTP 400 `verification` → signature mismatch, nothing credited.
    - HTTP 500 `bookkeeping` → payment is genuine but credits could not be
      recorded; the client shows the contact-support message.
    """
    result = verify_payment(db, body)
    return success_response(SuccessCode.PAYMENT_VERIFIED, data=result.model_dump(by_alias=True))
