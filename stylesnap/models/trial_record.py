"""Trial record model: one row per anonymous trial identity"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON, CheckConstraint
from sqlalchemy.sql import func
from stylesnap.db.base import Base


class TrialRecord(Base):
    """
    Server-side entitlement state for an anonymous browser.
    Grants one free generation, then one generation per paid credit.
    """
    __tablename__ = "trial_records"
    __table_args__ = (
        CheckConstraint("paid_credits >= 0", name="ck_trial_records_paid_credits_non_negative"),
    )

    id = Column(String(64), primary_key=True, index=True)

    ip = Column(String(255), nullable=True)
    last_ip = Column(String(255), nullable=True)
    user_metadata = Column(JSON, nullable=True)

    free_used = Column(Boolean, default=False, nullable=False)
    paid_credits = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_seen = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)

    def __repr__(self):
        return f"<TrialRecord(id='{self.id}', free_used={self.free_used}, paid_credits={self.paid_credits})>"

    @property
    def has_paid_credits(self) -> bool:
        return (self.paid_credits or 0) > 0

    def can_generate(self) -> bool:
        """True while the free generation is unused or a paid credit is left"""
        return not self.free_used or self.has_paid_credits
