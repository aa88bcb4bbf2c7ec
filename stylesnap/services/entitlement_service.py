"""Entitlement checks and atomic credit mutations for trial identities

Every mutation here is a single conditional UPDATE on the trial row, so two
concurrent requests from the same identity can never redeem more
generations than the row holds.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stylesnap.core.config import settings
from stylesnap.models.daily_quota import DailyQuota
from stylesnap.models.trial_record import TrialRecord
from stylesnap.schemas.trial_schemas import Entitlement
from stylesnap.services.trial_service import get_trial, register_trial, touch_trial
from stylesnap.errors.exceptions import PaymentRequiredException, FreeLimitReachedException

logger = logging.getLogger(__name__)

FREE = "free"
PAID = "paid"


def get_entitlement(db: Session, trial_id: str, touch: bool = False) -> Entitlement:
    """
    Entitlement snapshot for *trial_id*.

    An identity without a server row reads as fresh (free generation
    available, no paid credits); it is registered lazily by the generation
    gate.
    """
    trial = get_trial(db, trial_id)

    if not trial:
        return Entitlement(
            trial_id=trial_id,
            registered=False,
            free_used=False,
            paid_credits=0,
            has_paid_credits=False,
            can_generate=True,
        )

    if touch:
        touch_trial(db, trial_id)
        db.refresh(trial)

    return Entitlement(
        trial_id=trial.id,
        registered=True,
        free_used=bool(trial.free_used),
        paid_credits=trial.paid_credits or 0,
        has_paid_credits=trial.has_paid_credits,
        can_generate=trial.can_generate(),
    )


def _today():
    return datetime.now(timezone.utc).date()


def _daily_limit_enabled() -> bool:
    return settings.DAILY_FREE_LIMIT > 0


def _ensure_daily_row(db: Session) -> None:
    """Create today's quota row if missing (commits on its own)"""
    today = _today()
    if db.get(DailyQuota, today):
        return
    db.add(DailyQuota(day=today, free_used=0))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()


def _claim_daily_slot(db: Session) -> bool:
    claimed = db.query(DailyQuota).filter(
        DailyQuota.day == _today(),
        DailyQuota.free_used < settings.DAILY_FREE_LIMIT
    ).update({DailyQuota.free_used: DailyQuota.free_used + 1}, synchronize_session=False)
    return claimed == 1


def _release_daily_slot(db: Session) -> None:
    db.query(DailyQuota).filter(
        DailyQuota.day == _today(),
        DailyQuota.free_used > 0
    ).update({DailyQuota.free_used: DailyQuota.free_used - 1}, synchronize_session=False)


def reserve_generation(
    db: Session,
    trial_id: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None
) -> str:
    """
    Atomically claim one generation for *trial_id*.

    Returns FREE when the free generation was claimed, PAID when a paid
    credit was consumed. Raises PaymentRequiredException (or
    FreeLimitReachedException when only the global daily quota blocked a
    free generation) when nothing can be claimed.
    """
    trial = get_trial(db, trial_id)
    if trial is None:
        trial, _ = register_trial(db, trial_id, ip_address=ip_address, user_agent=user_agent)

    quota_blocked = False
    if not trial.free_used:
        if _daily_limit_enabled():
            _ensure_daily_row(db)

        claimed = db.query(TrialRecord).filter(
            TrialRecord.id == trial_id,
            TrialRecord.free_used.is_(False)
        ).update({TrialRecord.free_used: True}, synchronize_session=False)

        if claimed == 1 and _daily_limit_enabled() and not _claim_daily_slot(db):
            db.rollback()
            quota_blocked = True
            logger.info(f"Daily free quota reached, free generation refused for trial {trial_id}")
        elif claimed == 1:
            db.commit()
            return FREE
        else:
            db.rollback()

    consumed = db.query(TrialRecord).filter(
        TrialRecord.id == trial_id,
        TrialRecord.paid_credits > 0
    ).update({TrialRecord.paid_credits: TrialRecord.paid_credits - 1}, synchronize_session=False)

    if consumed == 1:
        db.commit()
        return PAID

    db.rollback()
    if quota_blocked:
        raise FreeLimitReachedException()
    raise PaymentRequiredException(
        detail="You have already used your free image. To generate more images, please proceed to payment."
    )


def release_generation(db: Session, trial_id: str, entitlement: str) -> bool:
    """
    Give back a claim after the generation itself failed.
    Returns False when the refund could not be recorded.
    """
    try:
        if entitlement == FREE:
            restored = db.query(TrialRecord).filter(
                TrialRecord.id == trial_id,
                TrialRecord.free_used.is_(True)
            ).update({TrialRecord.free_used: False}, synchronize_session=False)
            if restored and _daily_limit_enabled():
                _release_daily_slot(db)
        else:
            restored = add_paid_credits(db, trial_id, 1, commit=False)
        db.commit()
        return restored == 1
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to refund {entitlement} generation for trial {trial_id}: {str(e)}", exc_info=True)
        return False


def add_paid_credits(db: Session, trial_id: str, credits: int, commit: bool = True) -> int:
    """
    Atomically add *credits* to the trial's paid balance.
    Returns the number of rows updated (0 when the trial does not exist).
    """
    updated = db.query(TrialRecord).filter(
        TrialRecord.id == trial_id
    ).update({TrialRecord.paid_credits: TrialRecord.paid_credits + credits}, synchronize_session=False)
    if commit:
        db.commit()
    return updated
