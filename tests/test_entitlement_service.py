import pytest

from stylesnap.core.config import settings
from stylesnap.errors.exceptions import FreeLimitReachedException, PaymentRequiredException
from stylesnap.services.trial_service import get_trial
from stylesnap.services import entitlement_service
from stylesnap.services.entitlement_service import (
    FREE,
    PAID,
    add_paid_credits,
    get_entitlement,
    release_generation,
    reserve_generation,
)

from conftest import fetch_trial, make_trial


@pytest.fixture(autouse=True)
def no_daily_limit(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "DAILY_FREE_LIMIT", 0)


def test_unknown_identity_is_fresh(db):
    entitlement = get_entitlement(db, "unknown-id")

    assert entitlement.registered is False
    assert entitlement.free_used is False
    assert entitlement.paid_credits == 0
    assert entitlement.can_generate is True


def test_first_reservation_uses_free_generation_and_registers(db, session_factory):
    assert reserve_generation(db, "fresh-id", ip_address="198.51.100.7") == FREE

    trial = fetch_trial(session_factory, "fresh-id")
    assert trial is not None
    assert trial.free_used is True
    assert trial.paid_credits == 0


def test_paid_credit_is_decremented_by_exactly_one(db, session_factory):
    make_trial(db, "paid-id", free_used=True, paid_credits=3)

    assert reserve_generation(db, "paid-id") == PAID

    assert fetch_trial(session_factory, "paid-id").paid_credits == 2


def test_free_generation_preferred_over_paid_credits(db, session_factory):
    make_trial(db, "both-id", free_used=False, paid_credits=2)

    assert reserve_generation(db, "both-id") == FREE

    trial = fetch_trial(session_factory, "both-id")
    assert trial.free_used is True
    assert trial.paid_credits == 2


def test_blocked_without_free_or_credits(db, session_factory):
    make_trial(db, "blocked-id", free_used=True, paid_credits=0)

    with pytest.raises(PaymentRequiredException) as exc_info:
        reserve_generation(db, "blocked-id")

    assert exc_info.value.status_code == 402
    assert exc_info.value.response_status == "need_payment"
    assert fetch_trial(session_factory, "blocked-id").paid_credits == 0


def test_sequential_claims_never_exceed_balance(db, session_factory):
    make_trial(db, "one-credit", free_used=True, paid_credits=1)

    assert reserve_generation(db, "one-credit") == PAID
    with pytest.raises(PaymentRequiredException):
        reserve_generation(db, "one-credit")

    assert fetch_trial(session_factory, "one-credit").paid_credits == 0


@pytest.fixture()
def interleaved_sessions(session_factory, monkeypatch: pytest.MonkeyPatch):
    """
    Two sessions where the second read its row before the first claimed.

    The second session keeps seeing that stale snapshot, so only the
    conditional UPDATE stands between it and a double claim.
    """
    first = session_factory()
    second = session_factory()
    stale = {}

    def snapshot(trial_id):
        stale[trial_id] = get_trial(second, trial_id)
        return stale[trial_id]

    def racing_get_trial(db, trial_id):
        if db is second and trial_id in stale:
            return stale[trial_id]
        return get_trial(db, trial_id)

    monkeypatch.setattr(entitlement_service, "get_trial", racing_get_trial)
    try:
        yield first, second, snapshot
    finally:
        first.close()
        second.close()


def test_interleaved_free_claims_flip_free_once(db, session_factory, interleaved_sessions):
    first, second, snapshot = interleaved_sessions
    make_trial(db, "race-free", free_used=False)
    assert snapshot("race-free").free_used is False

    assert reserve_generation(first, "race-free") == FREE
    with pytest.raises(PaymentRequiredException) as exc_info:
        reserve_generation(second, "race-free")

    assert exc_info.value.status_code == 402
    trial = fetch_trial(session_factory, "race-free")
    assert trial.free_used is True
    assert trial.paid_credits == 0


def test_interleaved_paid_claims_never_go_negative(db, session_factory, interleaved_sessions):
    first, second, snapshot = interleaved_sessions
    make_trial(db, "race-paid", free_used=True, paid_credits=1)
    assert snapshot("race-paid").paid_credits == 1

    assert reserve_generation(first, "race-paid") == PAID
    with pytest.raises(PaymentRequiredException):
        reserve_generation(second, "race-paid")

    assert fetch_trial(session_factory, "race-paid").paid_credits == 0


def test_interleaved_claims_spend_free_then_credit(db, session_factory, interleaved_sessions):
    first, second, snapshot = interleaved_sessions
    make_trial(db, "race-both", free_used=False, paid_credits=1)
    assert snapshot("race-both").free_used is False

    assert reserve_generation(first, "race-both") == FREE
    assert reserve_generation(second, "race-both") == PAID

    trial = fetch_trial(session_factory, "race-both")
    assert trial.free_used is True
    assert trial.paid_credits == 0


def test_release_restores_free_generation(db, session_factory):
    entitlement = reserve_generation(db, "refund-free")

    assert release_generation(db, "refund-free", entitlement) is True
    assert fetch_trial(session_factory, "refund-free").free_used is False


def test_release_restores_paid_credit(db, session_factory):
    make_trial(db, "refund-paid", free_used=True, paid_credits=1)
    entitlement = reserve_generation(db, "refund-paid")

    assert release_generation(db, "refund-paid", entitlement) is True
    assert fetch_trial(session_factory, "refund-paid").paid_credits == 1


def test_add_paid_credits_is_atomic_increment(db, session_factory):
    make_trial(db, "credit-me", paid_credits=2)

    assert add_paid_credits(db, "credit-me", 3) == 1
    assert add_paid_credits(db, "missing", 3) == 0
    assert fetch_trial(session_factory, "credit-me").paid_credits == 5


def test_daily_free_quota_blocks_free_but_not_paid(db, session_factory, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "DAILY_FREE_LIMIT", 1)
    make_trial(db, "paid-later", free_used=False, paid_credits=1)

    assert reserve_generation(db, "first-today") == FREE

    with pytest.raises(FreeLimitReachedException) as exc_info:
        reserve_generation(db, "second-today")
    assert exc_info.value.response_status == "free_limit_reached"
    assert fetch_trial(session_factory, "second-today").free_used is False

    # Quota exhausted: the paid credit is used instead of the free generation
    assert reserve_generation(db, "paid-later") == PAID
    trial = fetch_trial(session_factory, "paid-later")
    assert trial.free_used is False
    assert trial.paid_credits == 0
