"""Catalog domain schemas - search, contact and inquiry payloads"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import validate_email, validate_phone


class SearchQuery(BaseModel):
    postcode: Optional[str] = None
    radius: int = Field(5, ge=1, le=100)
    category: Optional[str] = None
    priceFrom: Optional[float] = Field(None, ge=0)
    priceTo: Optional[float] = Field(None, ge=0)
    rating: Optional[float] = Field(None, ge=0, le=5)
    cultureTags: list[str] = Field(default_factory=list)
    sort: Literal["distance", "rating"] = "distance"
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)

    @field_validator("cultureTags", mode="before")
    @classmethod
    def split_tags(cls, v):
        # Accept repeated params and comma separated values
        if isinstance(v, str):
            v = [v]
        return [tag.strip() for item in v or [] for tag in item.split(",") if tag.strip()]

    @model_validator(mode="after")
    def check_price_range(self):
        if self.priceFrom is not None and self.priceTo is not None and self.priceFrom > self.priceTo:
            raise ValueError("priceFrom must not exceed priceTo")
        return self

    def to_params(self) -> dict:
        params = self.model_dump(exclude={"cultureTags"})
        if self.cultureTags:
            params["cultureTags"] = ",".join(self.cultureTags)
        return params


class ContactForm(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: str
    phone: Optional[str] = None
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=10, max_length=5000)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else None


class InquiryCreate(BaseModel):
    eventDate: datetime
    eventType: str = Field(..., min_length=1, max_length=100)
    guestsCount: Optional[int] = Field(None, ge=1, le=10000)
    budgetRange: Optional[str] = None
    location: Optional[str] = None
    message: str = Field(..., min_length=10, max_length=2000)
    fromPhone: Optional[str] = None
    searchPostcode: Optional[str] = None
    searchRadius: Optional[int] = None

    @field_validator("eventDate")
    @classmethod
    def event_in_future(cls, v: datetime):
        aware = v if v.tzinfo else v.replace(tzinfo=timezone.utc)
        if aware <= datetime.now(timezone.utc):
            raise ValueError("Event date must be in the future")
        return v

    @field_validator("fromPhone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else None


class FavoriteCreate(BaseModel):
    providerId: str = Field(..., min_length=1)
