"""Trial identity service: registration, lookup and removal of trial records"""
import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from stylesnap.models.trial_record import TrialRecord
from stylesnap.errors.exceptions import InvalidTrialIdException
from stylesnap.utils.logger import log_trial_event

logger = logging.getLogger(__name__)

MAX_TRIAL_ID_LENGTH = 64


def generate_trial_id() -> str:
    """Generate a new random trial identity (UUID v4)"""
    return str(uuid.uuid4())


def normalize_trial_id(trial_id: Optional[str]) -> str:
    """
    Validate a trial identity coming from a client.
    Raises InvalidTrialIdException for missing, blank or oversized values.
    """
    if not isinstance(trial_id, str) or trial_id.strip() == "":
        raise InvalidTrialIdException()
    trial_id = trial_id.strip()
    if len(trial_id) > MAX_TRIAL_ID_LENGTH:
        raise InvalidTrialIdException(detail="trialId is too long")
    return trial_id


def get_trial(db: Session, trial_id: str) -> Optional[TrialRecord]:
    """Get a trial record by identity"""
    return db.query(TrialRecord).filter(TrialRecord.id == trial_id).first()


def register_trial(
    db: Session,
    trial_id: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None
) -> Tuple[TrialRecord, bool]:
    """
    Insert a trial record if it does not exist yet.
    Returns (trial, created) tuple.

    Existing rows only get last_ip / last_seen refreshed; entitlement
    fields are never touched here.
    """
    existing = get_trial(db, trial_id)
    if existing:
        touch_trial(db, trial_id, ip_address)
        db.refresh(existing)
        return existing, False

    trial = TrialRecord(
        id=trial_id,
        ip=ip_address or "unknown",
        last_ip=ip_address or "unknown",
        user_metadata={"ua": user_agent},
        free_used=False,
        paid_credits=0
    )
    db.add(trial)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent registration of the same identity won the insert
        db.rollback()
        existing = get_trial(db, trial_id)
        if existing is None:
            raise
        return existing, False

    db.refresh(trial)
    log_trial_event("REGISTERED", trial_id=trial_id, client_ip=ip_address)
    return trial, True


def touch_trial(db: Session, trial_id: str, ip_address: Optional[str] = None) -> bool:
    """Refresh last_seen (and last_ip when known) without a whole-row write"""
    values = {TrialRecord.last_seen: func.now()}
    if ip_address:
        values[TrialRecord.last_ip] = ip_address
    updated = db.query(TrialRecord).filter(
        TrialRecord.id == trial_id
    ).update(values, synchronize_session=False)
    db.commit()
    return updated > 0


def delete_trial(db: Session, trial_id: str) -> bool:
    """Delete a trial record; returns False when nothing was deleted"""
    deleted = db.query(TrialRecord).filter(
        TrialRecord.id == trial_id
    ).delete(synchronize_session=False)
    db.commit()

    if deleted:
        log_trial_event("DISCARDED", trial_id=trial_id)
    return deleted > 0
