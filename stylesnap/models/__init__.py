"""Database models"""
from stylesnap.models.trial_record import TrialRecord
from stylesnap.models.payment import PaymentOrder, PaymentStatus
from stylesnap.models.daily_quota import DailyQuota

__all__ = ["TrialRecord", "PaymentOrder", "PaymentStatus", "DailyQuota"]
