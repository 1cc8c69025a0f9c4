from pydantic import BaseModel, ConfigDict, Field, FiniteFloat
from typing import Optional, List
from datetime import datetime, date


# ---------- requests ----------
# Fields are optional so missing ones surface as 400s with a readable message

class UpdateTransactionRequest(BaseModel):
    transaction_id: Optional[str] = None
    action: Optional[str] = None


class ProcessRefundRequest(BaseModel):
    transaction_id: Optional[str] = None
    booking_id: Optional[str] = None
    user_id: Optional[str] = None
    # NaN and Infinity literals are valid JSON to the parser but never a refund amount
    amount: Optional[FiniteFloat] = None


# ---------- rows ----------

class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DestinationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: str
    country: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    price_per_person: float
    created_at: Optional[datetime] = None


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    user_id: str
    trip_id: Optional[str] = None
    start_date: date
    end_date: date
    travelers_count: int
    total_amount: float
    status: str
    refund_requested: bool = False
    refund_processed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingWithDestinationOut(BookingOut):
    destinations: Optional[DestinationOut] = Field(default=None, validation_alias="destination")


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    user_id: Optional[str] = None
    booking_id: Optional[str] = None
    amount: float
    payment_method: str
    status: str
    refund_status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminTransactionOut(TransactionOut):
    bookings: Optional[BookingOut] = Field(default=None, validation_alias="booking")
    profiles: Optional[ProfileOut] = Field(default=None, validation_alias="profile")
    refund_eligible: bool = False


class UserTransactionOut(TransactionOut):
    bookings: Optional[BookingWithDestinationOut] = Field(default=None, validation_alias="booking")


# ---------- responses ----------

class AdminTransactionList(BaseModel):
    data: List[AdminTransactionOut]


class UserTransactionList(BaseModel):
    data: List[UserTransactionOut]


class SuccessResponse(BaseModel):
    success: bool = True


class RefundResponse(BaseModel):
    success: bool = True
    refund: TransactionOut
