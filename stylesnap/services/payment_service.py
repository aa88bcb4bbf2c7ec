from __future__ import annotations

import hashlib
import hmac
import logging
import time
from datetime import datetime, timezone
from typing import Optional

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stylesnap.core.config import settings
from stylesnap.models.payment import PaymentOrder, PaymentStatus
from stylesnap.schemas.payment_schemas import (
    OrderCreateRequest,
    OrderHandle,
    PaymentVerifyRequest,
    PaymentVerifyResult,
)
from stylesnap.services.entitlement_service import add_paid_credits, get_entitlement
from stylesnap.services.trial_service import normalize_trial_id, register_trial
from stylesnap.utils.logger import log_payment_event
from stylesnap.errors.exceptions import (
    ValidationException,
    VerificationFailedException,
    ServerMisconfiguredException,
    PaymentGatewayException,
    BookkeepingException,
)

logger = logging.getLogger(__name__)


def _generate_receipt() -> str:
    """Receipt id embedding the creation time in milliseconds, e.g. "order_rcptid_1760000000000"."""
    return f"order_rcptid_{int(time.time() * 1000)}"


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    """Hex HMAC-SHA256 of "order_id|payment_id" keyed with the gateway secret."""
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    expected = compute_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected, signature or "")


class RazorpayClient:
    """Minimal Razorpay Orders API client (basic auth with key id / secret)."""

    def __init__(
        self,
        key_id: Optional[str] = None,
        key_secret: Optional[str] = None,
        api_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret if key_secret is not None else settings.RAZORPAY_KEY_SECRET
        self.api_url = (api_url or settings.RAZORPAY_API_URL).rstrip("/")
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    async def create_order(self, amount: int, currency: str, receipt: str, notes: dict) -> dict:
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
        }
        try:
            async with httpx.AsyncClient(
                timeout=settings.HTTP_TIMEOUT_SECONDS,
                auth=(self.key_id, self.key_secret),
                transport=self.transport,
            ) as client:
                resp = await client.post(f"{self.api_url}/orders", json=payload)
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PaymentGatewayException(detail=f"Payment gateway error: {exc}") from exc

        if resp.status_code >= 400 or data.get("status") != "created":
            description = (data.get("error") or {}).get("description") or data.get("description")
            raise PaymentGatewayException(
                detail=f"BAD_REQUEST_ERROR: {description or 'Failed to create order'}",
                data={"gateway": data},
            )
        return data


def get_payment_gateway() -> RazorpayClient:
    """FastAPI dependency; overridden in tests"""
    return RazorpayClient()


async def create_order(
    db: Session,
    gateway: RazorpayClient,
    request: OrderCreateRequest,
) -> OrderHandle:
    """
    1. Create the order on the gateway (receipt + trialId in notes).
    2. Record a PENDING PaymentOrder so verification knows whom to credit.
    3. Return the handle the hosted checkout needs.
    """
    trial_id = normalize_trial_id(request.trial_id)
    if not gateway.is_configured:
        raise ServerMisconfiguredException(detail="Missing RAZORPAY_KEY_ID or RAZORPAY_KEY_SECRET")

    # One credit is priced by the server; clients may only echo it
    amount = settings.PAYMENT_AMOUNT
    currency = settings.PAYMENT_CURRENCY.upper()
    if request.amount is not None and request.amount != amount:
        raise ValidationException(detail=f"Invalid amount: a credit costs {amount} {currency}")
    if request.currency is not None and request.currency.upper() != currency:
        raise ValidationException(detail=f"Invalid currency: payments are taken in {currency}")
    receipt = _generate_receipt()

    try:
        order = await gateway.create_order(amount, currency, receipt, notes={"trialId": trial_id})
    except PaymentGatewayException as exc:
        log_payment_event("ORDER FAILED", receipt, trial_id=trial_id, error=str(exc.detail))
        raise

    order_row = PaymentOrder(
        order_id=order["id"],
        trial_id=trial_id,
        amount=amount,
        currency=currency,
        credits=settings.CREDITS_PER_PAYMENT,
        status=PaymentStatus.PENDING,
        gateway_response=order,
    )
    try:
        db.add(order_row)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.error(f"[Payment] DB insert PENDING failed for order {order['id']}: {exc}")
        raise

    log_payment_event("ORDER CREATED", order["id"], trial_id=trial_id)
    return OrderHandle(
        id=order["id"],
        amount=order_row.amount,
        currency=order_row.currency,
        receipt=order.get("receipt", receipt),
        key_id=gateway.key_id,
    )


def verify_payment(db: Session, request: PaymentVerifyRequest) -> PaymentVerifyResult:
    """
    Verify the checkout signature and grant the order's credits.

    Transaction safety
    ───────────────────
    • The order row is locked while the credit is added and the order is
      marked SUCCESS, both in one commit.
    • An order already marked SUCCESS is reported as verified without
      crediting again.
    • If the credit cannot be recorded after a valid signature, a
      BookkeepingException is raised; the payment itself is not reversed.
    """
    order_id = request.razorpay_order_id
    payment_id = request.razorpay_payment_id
    signature = request.razorpay_signature
    if not order_id or not payment_id or not signature:
        raise ValidationException(detail="Missing required fields")

    if not settings.RAZORPAY_KEY_SECRET:
        raise ServerMisconfiguredException(detail="Missing RAZORPAY_KEY_SECRET")

    if not verify_signature(order_id, payment_id, signature, settings.RAZORPAY_KEY_SECRET):
        log_payment_event("SIGNATURE MISMATCH", order_id, trial_id=request.trial_id, error="invalid signature")
        raise VerificationFailedException(data={"verified": False})

    order_row = db.query(PaymentOrder).filter(PaymentOrder.order_id == order_id).first()
    if order_row and order_row.status == PaymentStatus.SUCCESS:
        logger.info(f"[Payment] Duplicate verification for already-SUCCESS order {order_id}")
        return _verified_result(db, order_row.trial_id, 0, already_processed=True)

    trial_id = order_row.trial_id if order_row else request.trial_id
    credits = order_row.credits if order_row else settings.CREDITS_PER_PAYMENT

    try:
        trial_id = normalize_trial_id(trial_id)
        register_trial(db, trial_id)

        order_row = (
            db.query(PaymentOrder)
            .filter(PaymentOrder.order_id == order_id)
            .with_for_update()
            .first()
        )
        if order_row and order_row.status == PaymentStatus.SUCCESS:
            db.rollback()
            return _verified_result(db, trial_id, 0, already_processed=True)

        if add_paid_credits(db, trial_id, credits, commit=False) != 1:
            raise RuntimeError(f"trial {trial_id} could not be credited")

        now = datetime.now(timezone.utc)
        if order_row:
            order_row.status = PaymentStatus.SUCCESS
            order_row.payment_id = payment_id
            order_row.paid_at = now
        else:
            # Order created outside this service; record it for idempotency
            db.add(PaymentOrder(
                order_id=order_id,
                trial_id=trial_id,
                amount=settings.PAYMENT_AMOUNT,
                currency=settings.PAYMENT_CURRENCY,
                credits=credits,
                status=PaymentStatus.SUCCESS,
                payment_id=payment_id,
                paid_at=now,
            ))
        db.commit()
    except IntegrityError:
        # A concurrent verification recorded the same order first
        db.rollback()
        return _verified_result(db, trial_id, 0, already_processed=True)
    except Exception as exc:
        db.rollback()
        log_payment_event("CREDIT FAILED", order_id, trial_id=trial_id, error=str(exc), critical=True)
        raise BookkeepingException(data={"verified": True, "orderId": order_id, "paymentId": payment_id}) from exc

    log_payment_event("VERIFIED", order_id, trial_id=trial_id)
    return _verified_result(db, trial_id, credits)


def _verified_result(db: Session, trial_id: str, credits_added: int, already_processed: bool = False) -> PaymentVerifyResult:
    entitlement = get_entitlement(db, trial_id)
    return PaymentVerifyResult(
        verified=True,
        trial_id=trial_id,
        credits_added=credits_added,
        paid_credits=entitlement.paid_credits,
        already_processed=already_processed,
    )
