"""Account domain schemas - profile, password, preferences and vendor business data"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email, validate_password, validate_phone, validate_url
from ..onboarding.schemas import WeeklyScheduleDay


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    image: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else v

    @field_validator("image")
    @classmethod
    def check_image(cls, v):
        return validate_url(v)


class PasswordChange(BaseModel):
    currentPassword: str = Field(..., min_length=1)
    newPassword: str

    @field_validator("newPassword")
    @classmethod
    def check_new_password(cls, v):
        return validate_password(v)


class AccountDelete(BaseModel):
    # Social login accounts confirm with the literal CONFIRM_DELETE
    password: str = Field(..., min_length=1)


class PreferencesResponse(BaseModel):
    darkMode: bool = False
    emailNotifications: bool = True
    smsNotifications: bool = False


class PreferencesUpdate(BaseModel):
    darkMode: Optional[bool] = None
    emailNotifications: Optional[bool] = None
    smsNotifications: Optional[bool] = None


class VendorProfileUpdate(BaseModel):
    businessName: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    phonePublic: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    serviceRadiusMiles: Optional[int] = Field(None, ge=1, le=100)
    categories: Optional[list[str]] = None
    subcategories: Optional[list[str]] = None
    cultureTraditionTags: Optional[list[str]] = None
    instagram: Optional[str] = None
    tiktok: Optional[str] = None
    facebook: Optional[str] = None
    coverImage: Optional[str] = None
    photos: Optional[list[str]] = None
    priceFrom: Optional[float] = Field(None, ge=0)

    @field_validator("phonePublic")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else v

    @field_validator("website", "coverImage")
    @classmethod
    def check_url(cls, v):
        return validate_url(v)


class ListingCreate(BaseModel):
    headline: str = Field(..., min_length=1, max_length=200)
    longDescription: Optional[str] = Field(None, max_length=5000)
    price: float = Field(..., ge=0)
    timeEstimate: str = Field(..., min_length=1, max_length=100)
    coverImageUrl: Optional[str] = None
    galleryUrls: list[str] = Field(default_factory=list)

    @field_validator("headline", "timeEstimate")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be blank")
        return v.strip()


class ListingUpdate(BaseModel):
    headline: Optional[str] = Field(None, min_length=1, max_length=200)
    longDescription: Optional[str] = Field(None, max_length=5000)
    price: Optional[float] = Field(None, ge=0)
    timeEstimate: Optional[str] = Field(None, min_length=1, max_length=100)
    coverImageUrl: Optional[str] = None
    galleryUrls: Optional[list[str]] = None


class TeamMemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    role: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    imageUrl: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v) if v else None


class ScheduleReplace(BaseModel):
    schedules: list[WeeklyScheduleDay] = Field(..., min_length=7, max_length=7)

    @field_validator("schedules")
    @classmethod
    def one_per_day(cls, v):
        if sorted(day.dayOfWeek for day in v) != list(range(7)):
            raise ValueError("Schedule must contain each day of the week exactly once")
        return sorted(v, key=lambda day: day.dayOfWeek)
