"""Engagement domain schemas - inquiries, quotes, reviews and notifications"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...constants import INQUIRY_STATUSES
from ...shared.validators import validate_email, validate_phone

PaymentMode = Literal["FULL_PAYMENT", "DEPOSIT_BALANCE", "CASH_ON_DELIVERY"]

ReportReason = Literal["SPAM", "INAPPROPRIATE", "FAKE", "HARASSMENT", "CONFLICT_OF_INTEREST", "OTHER"]


def _not_blank(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Message cannot be empty")
    return v.strip()


# ============================================================================
# INQUIRIES
# ============================================================================


class InquiryReply(BaseModel):
    text: str = Field(..., max_length=5000)

    @field_validator("text")
    @classmethod
    def check_text(cls, v):
        return _not_blank(v)


class InquiryStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def known_status(cls, v):
        v = v.upper()
        if v not in INQUIRY_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(INQUIRY_STATUSES)}")
        return v


# ============================================================================
# QUOTES
# ============================================================================


class QuoteAccept(BaseModel):
    """Booking contact details default to the signed-in client"""

    paymentMode: PaymentMode
    clientName: Optional[str] = Field(None, min_length=2, max_length=100)
    clientEmail: Optional[str] = None
    clientPhone: Optional[str] = None
    eventLocation: Optional[str] = Field(None, max_length=500)
    specialRequests: Optional[str] = Field(None, max_length=2000)

    @field_validator("clientEmail")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("clientPhone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else None


class QuoteDecline(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class QuoteItem(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    qty: int = Field(..., gt=0)
    unitPrice: float = Field(..., ge=0)

    @property
    def total_price(self) -> float:
        return round(self.qty * self.unitPrice, 2)


class QuoteCreate(BaseModel):
    inquiryId: str = Field(..., min_length=1)
    items: list[QuoteItem] = Field(..., min_length=1)
    allowedPaymentModes: list[PaymentMode] = Field(
        default_factory=lambda: ["FULL_PAYMENT", "DEPOSIT_BALANCE", "CASH_ON_DELIVERY"], min_length=1
    )
    depositPercentage: float = Field(50, ge=0, le=100)
    validUntil: datetime
    terms: Optional[str] = Field(None, max_length=5000)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("validUntil")
    @classmethod
    def valid_until_future(cls, v: datetime):
        aware = v if v.tzinfo else v.replace(tzinfo=timezone.utc)
        if aware <= datetime.now(timezone.utc):
            raise ValueError("validUntil must be in the future")
        return v

    @property
    def total(self) -> float:
        return round(sum(item.total_price for item in self.items), 2)


# ============================================================================
# REVIEWS
# ============================================================================


class ReviewCreate(BaseModel):
    bookingId: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    body: str = Field(..., min_length=10, max_length=5000)
    photos: list[str] = Field(default_factory=list)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, max_length=200)
    body: Optional[str] = Field(None, min_length=10, max_length=5000)


class ReviewResponseCreate(BaseModel):
    content: str = Field(..., max_length=2000)

    @field_validator("content")
    @classmethod
    def check_content(cls, v):
        return _not_blank(v)


class ReviewReport(BaseModel):
    reason: ReportReason
    details: Optional[str] = Field(None, max_length=1000)
