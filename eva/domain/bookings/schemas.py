"""Booking domain schemas"""

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_phone
from .lifecycle import BOOKING_STATUSES

PaymentMode = Literal["FULL_PAYMENT", "DEPOSIT_BALANCE", "CASH_ON_DELIVERY"]


class BookingServiceItem(BaseModel):
    id: str
    headline: str
    minPrice: float = Field(0, ge=0)
    maxPrice: float = Field(0, ge=0)


class BookingCreate(BaseModel):
    """Booking request for a vendor's listings"""

    providerId: str = Field(..., min_length=1)
    services: list[BookingServiceItem] = Field(..., min_length=1)
    eventDate: datetime
    eventLocation: str = Field(..., min_length=1, max_length=500)
    guestsCount: Optional[int] = Field(None, ge=1)
    specialRequests: Optional[str] = Field(None, max_length=2000)
    clientPhone: Optional[str] = ""
    paymentMode: PaymentMode = "FULL_PAYMENT"

    @field_validator("eventDate")
    @classmethod
    def event_in_future(cls, v: datetime):
        aware = v if v.tzinfo else v.replace(tzinfo=timezone.utc)
        if aware <= datetime.now(timezone.utc):
            raise ValueError("Event date must be in the future")
        return v

    @field_validator("clientPhone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else v


class BookingStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def known_status(cls, v):
        v = v.upper()
        if v not in BOOKING_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(BOOKING_STATUSES)}")
        return v


class BookingCompleteRequest(BaseModel):
    completionNotes: Optional[str] = Field(None, max_length=2000)


class PaymentAction(BaseModel):
    type: Literal["DEPOSIT", "FULL", "BALANCE"]
    amount: Optional[float] = None
    label: str


class CheckoutResponse(BaseModel):
    checkoutUrl: Optional[str] = None
    paymentAction: PaymentAction


class BookingListResponse(BaseModel):
    bookings: list[dict[str, Any]]
    pagination: Optional[dict[str, Any]] = None
    statusCounts: Optional[dict[str, int]] = None


class BookingDetailResponse(BaseModel):
    booking: dict[str, Any]
    timeline: list[dict[str, Any]] = Field(default_factory=list)
    statusConfig: dict[str, str]
    canCancel: bool
    paymentAction: Optional[PaymentAction] = None
    isUpcoming: bool
    isPast: bool
