"""PaymentOrder database model."""
from sqlalchemy import Column, Integer, String, DateTime, JSON, Enum as SQLEnum
from sqlalchemy.sql import func
from enum import Enum
from stylesnap.db.base import Base


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class PaymentOrder(Base):
    """Tracks every gateway order created for a trial identity."""
    __tablename__ = "payment_orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(String(100), unique=True, nullable=False, index=True)
    trial_id = Column(String(64), nullable=False, index=True)

    # Amount is in minor units (paise for INR)
    amount = Column(Integer, nullable=False)
    currency = Column(String(10), nullable=False, default="INR")
    credits = Column(Integer, nullable=False, default=1)

    status = Column(
        SQLEnum(
            PaymentStatus,
            name="paymentstatus",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    payment_id = Column(String(100), nullable=True)

    gateway_response = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return (
            f"<PaymentOrder(id={self.id}, order_id={self.order_id}, "
            f"trial_id={self.trial_id}, status={self.status})>"
        )
