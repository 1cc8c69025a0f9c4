import uuid
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, String, Date, Numeric, Integer, ForeignKey, DateTime, Boolean, Index
from sqlalchemy.orm import relationship
from ..database import Base
import enum


class BookingStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    COMPLETED = "completed"  # Implicit, once the end date has passed
    CANCELLED = "cancelled"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    # Points at destinations.id
    trip_id = Column(String(36), ForeignKey("destinations.id", ondelete="SET NULL"), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    travelers_count = Column(Integer, nullable=False, default=1)
    total_amount = Column(Numeric(10, 2), default=0)
    status = Column(String(20), default=BookingStatus.UPCOMING.value)

    # Refund tracking
    refund_requested = Column(Boolean, default=False, nullable=False)
    refund_processed = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    profile = relationship("Profile")
    destination = relationship("Destination")
    transactions = relationship("Transaction", back_populates="booking")

    __table_args__ = (
        Index("ix_booking_user", "user_id"),
        Index("ix_booking_status", "status"),
    )

    @staticmethod
    def quote_total(destination, travelers_count: int) -> Decimal:
        """Total charged at booking time: price per person times travelers."""
        return Decimal(str(destination.price_per_person or 0)) * travelers_count

    def __repr__(self):
        return f"<Booking {self.id} {self.status}>"
