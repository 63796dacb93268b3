"""Administration schemas - users, vendors, reference data, moderation and data tools"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...constants import EXPORT_FORMATS, EXPORT_TYPES, IMPORT_TYPES, PLAN_TIERS, USER_STATUSES
from ...shared.validators import validate_date_range, validate_phone, validate_slug, validate_url

PortalRole = Literal["USER", "VENDOR", "ADMIN"]
ModerationAction = Literal["APPROVE", "REJECT", "SUSPEND", "ACTIVATE", "FEATURE", "UNFEATURE", "VERIFY", "UNVERIFY"]
ReviewModerationStatus = Literal["APPROVED", "REJECTED", "FLAGGED"]


def _optional_slug(v: Optional[str]) -> Optional[str]:
    return validate_slug(v) if v else None


# ============================================================================
# USERS
# ============================================================================


class AdminUserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[PortalRole] = None
    status: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("role", mode="before")
    @classmethod
    def upper_role(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator("status")
    @classmethod
    def known_status(cls, v):
        if v is None:
            return v
        v = v.upper()
        if v not in USER_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(USER_STATUSES)}")
        return v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else v


# ============================================================================
# VENDORS
# ============================================================================


class VendorBase(BaseModel):
    businessName: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    categories: Optional[list[str]] = None
    cultureTraditionTags: Optional[list[str]] = None
    serviceRadiusMiles: Optional[int] = Field(None, ge=1, le=100)
    address: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    priceFrom: Optional[float] = Field(None, ge=0)
    phonePublic: Optional[str] = None
    website: Optional[str] = None
    instagram: Optional[str] = None
    coverImage: Optional[str] = None
    isPublished: Optional[bool] = None

    @field_validator("website")
    @classmethod
    def check_website(cls, v):
        return validate_url(v)

    @field_validator("phonePublic")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else v


class VendorCreate(VendorBase):
    ownerUserId: str = Field(..., min_length=1)
    businessName: str = Field(..., min_length=2, max_length=200)


class VendorUpdate(VendorBase):
    pass


class VendorVerify(BaseModel):
    isVerified: bool
    isPublished: Optional[bool] = None
    isFeatured: Optional[bool] = None
    planTier: Optional[str] = None
    adminNotes: Optional[str] = Field(None, max_length=2000)

    @field_validator("planTier")
    @classmethod
    def known_tier(cls, v):
        if v is None:
            return v
        v = v.upper()
        if v not in PLAN_TIERS:
            raise ValueError(f"Plan tier must be one of: {', '.join(PLAN_TIERS)}")
        return v


class VendorModerate(BaseModel):
    action: ModerationAction
    reason: Optional[str] = Field(None, max_length=1000)


# ============================================================================
# REFERENCE DATA
# ============================================================================


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = Field(None, max_length=50)
    coverImage: Optional[str] = None
    displayOrder: Optional[int] = Field(None, ge=0)
    isFeatured: bool = False
    metaTitle: Optional[str] = Field(None, max_length=60)
    metaDescription: Optional[str] = None
    aliases: list[str] = Field(default_factory=list)
    subTags: list[str] = Field(default_factory=list)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return _optional_slug(v)

    @field_validator("coverImage")
    @classmethod
    def check_cover(cls, v):
        return validate_url(v)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = Field(None, max_length=50)
    coverImage: Optional[str] = None
    displayOrder: Optional[int] = Field(None, ge=0)
    isFeatured: Optional[bool] = None
    metaTitle: Optional[str] = Field(None, max_length=60)
    metaDescription: Optional[str] = None
    aliases: Optional[list[str]] = None
    subTags: Optional[list[str]] = None

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return _optional_slug(v)


class CityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = None
    county: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    country: str = Field("UK", max_length=100)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    displayOrder: Optional[int] = Field(None, ge=0)
    isFeatured: bool = False
    metaTitle: Optional[str] = Field(None, max_length=60)
    metaDescription: Optional[str] = Field(None, max_length=160)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return _optional_slug(v)


class CityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = None
    county: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    displayOrder: Optional[int] = Field(None, ge=0)
    isFeatured: Optional[bool] = None
    metaTitle: Optional[str] = Field(None, max_length=60)
    metaDescription: Optional[str] = Field(None, max_length=160)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return _optional_slug(v)


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    slug: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = Field(None, max_length=10)
    displayOrder: Optional[int] = Field(None, ge=0)
    isActive: bool = True

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return _optional_slug(v)


class TagUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    slug: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = Field(None, max_length=10)
    displayOrder: Optional[int] = Field(None, ge=0)
    isActive: Optional[bool] = None

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return _optional_slug(v)


# ============================================================================
# MODERATION, AUDIT AND DATA
# ============================================================================


class ReviewModerate(BaseModel):
    status: ReviewModerationStatus
    reason: Optional[str] = Field(None, max_length=1000)

    @field_validator("status", mode="before")
    @classmethod
    def upper_status(cls, v):
        return v.upper() if isinstance(v, str) else v


class AuditLogQuery(BaseModel):
    action: Optional[str] = None
    entityType: Optional[str] = None
    userId: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1, le=1000)

    @model_validator(mode="after")
    def check_range(self):
        validate_date_range(self.startDate, self.endDate)
        return self

    def to_params(self) -> dict:
        params = self.model_dump(exclude={"startDate", "endDate"})
        if self.startDate:
            params["startDate"] = self.startDate.isoformat()
        if self.endDate:
            params["endDate"] = self.endDate.isoformat()
        return params


class ExportRequest(BaseModel):
    type: str
    format: str = "json"
    filters: Optional[dict[str, Any]] = None

    @field_validator("type")
    @classmethod
    def known_type(cls, v):
        if v not in EXPORT_TYPES:
            raise ValueError(f"Type must be one of: {', '.join(EXPORT_TYPES)}")
        return v

    @field_validator("format")
    @classmethod
    def known_format(cls, v):
        v = v.lower()
        if v not in EXPORT_FORMATS:
            raise ValueError(f"Format must be one of: {', '.join(EXPORT_FORMATS)}")
        return v


class ImportRequest(BaseModel):
    type: str
    data: list[dict[str, Any]] = Field(..., min_length=1)
    isDryRun: bool = False

    @field_validator("type")
    @classmethod
    def known_type(cls, v):
        if v not in IMPORT_TYPES:
            raise ValueError(f"Type must be one of: {', '.join(IMPORT_TYPES)}")
        return v


class JobQueuedResponse(BaseModel):
    jobId: str
    status: str = "queued"
