import uuid
from datetime import datetime
from sqlalchemy import Column, String, Numeric, ForeignKey, DateTime, Index
from sqlalchemy.orm import relationship
from ..database import Base
import enum


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class RefundStatus(str, enum.Enum):
    """none -> pending (user cancelled) -> processed (admin refunded); failed is a dead end"""
    NONE = "none"
    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"


REFUND_PAYMENT_METHOD = "refund"


class Transaction(Base):
    """
    Payment ledger row.

    Refunds are appended as separate rows with a negative amount and
    payment_method "refund"; the original row is only re-flagged.
    """
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    booking_id = Column(String(36), ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False, default=0)
    payment_method = Column(String(50), nullable=False, default="")
    status = Column(String(20), nullable=False, default=TransactionStatus.PENDING.value)
    refund_status = Column(String(20), nullable=False, default=RefundStatus.NONE.value)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    booking = relationship("Booking", back_populates="transactions")
    profile = relationship("Profile")

    __table_args__ = (
        Index("ix_transaction_user", "user_id"),
        Index("ix_transaction_booking", "booking_id"),
        Index("ix_transaction_created_at", "created_at"),
    )

    @property
    def is_refund_leg(self) -> bool:
        return self.payment_method == REFUND_PAYMENT_METHOD

    @property
    def is_refunded(self) -> bool:
        return (
            self.status == TransactionStatus.REFUNDED.value
            or self.refund_status == RefundStatus.PROCESSED.value
        )

    @property
    def refund_eligible(self) -> bool:
        """Completed, not yet refunded, and a refund was asked for."""
        if self.status != TransactionStatus.COMPLETED.value or self.is_refunded:
            return False
        requested = bool(self.booking is not None and self.booking.refund_requested)
        return requested or self.refund_status == RefundStatus.PENDING.value

    def __repr__(self):
        return f"<Transaction {self.id} {self.amount} {self.status}>"
