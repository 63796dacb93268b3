"""Onboarding domain schemas - Pydantic models for the vendor onboarding wizard"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_phone, validate_time_of_day, validate_url

OnboardingStep = Literal[
    "basics",
    "location",
    "categories",
    "social",
    "media",
    "listings",
    "team",
    "schedule",
    "review",
]

ToggleField = Literal["categories", "subcategories", "cultureTraditionTags"]


class WeeklyScheduleDay(BaseModel):
    dayOfWeek: int = Field(..., ge=0, le=6)  # 0 = Sunday
    startTime: str = "09:00"
    endTime: str = "17:00"
    isClosed: bool = False

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, v):
        return validate_time_of_day(v)


class ListingDraft(BaseModel):
    headline: str = ""
    longDescription: str = ""
    price: Optional[float] = None
    timeEstimate: str = ""
    coverImageUrl: str = ""
    galleryUrls: list[str] = Field(default_factory=list)


class TeamMember(BaseModel):
    name: str = ""
    photo: Optional[str] = ""


def default_weekly_schedule() -> list[WeeklyScheduleDay]:
    # Weekends closed, 09:00-17:00 otherwise
    return [
        WeeklyScheduleDay(dayOfWeek=day, isClosed=day in (0, 6)) for day in range(7)
    ]


class OnboardingData(BaseModel):
    businessName: str = ""
    description: str = ""
    phonePublic: str = ""
    website: str = ""
    address: str = ""
    city: str = ""
    postcode: str = ""
    serviceRadiusMiles: int = 15
    categories: list[str] = Field(default_factory=list)
    subcategories: list[str] = Field(default_factory=list)
    cultureTraditionTags: list[str] = Field(default_factory=list)
    instagram: str = ""
    tiktok: str = ""
    facebook: str = ""
    coverImage: str = ""
    photos: list[str] = Field(default_factory=list)
    priceFrom: Optional[float] = None
    listings: list[ListingDraft] = Field(default_factory=list)
    weeklySchedule: list[WeeklyScheduleDay] = Field(default_factory=default_weekly_schedule)
    teamMembers: list[TeamMember] = Field(default_factory=list)


class OnboardingDataUpdate(BaseModel):
    """Partial update - only fields that are sent are merged"""

    businessName: Optional[str] = None
    description: Optional[str] = None
    phonePublic: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    serviceRadiusMiles: Optional[int] = Field(None, ge=1, le=500)
    categories: Optional[list[str]] = None
    subcategories: Optional[list[str]] = None
    cultureTraditionTags: Optional[list[str]] = None
    instagram: Optional[str] = None
    tiktok: Optional[str] = None
    facebook: Optional[str] = None
    coverImage: Optional[str] = None
    photos: Optional[list[str]] = None
    priceFrom: Optional[float] = Field(None, ge=0)
    listings: Optional[list[ListingDraft]] = None
    weeklySchedule: Optional[list[WeeklyScheduleDay]] = None
    teamMembers: Optional[list[TeamMember]] = None

    @field_validator("phonePublic")
    @classmethod
    def check_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("website")
    @classmethod
    def check_website(cls, v):
        return validate_url(v)


class ToggleItemRequest(BaseModel):
    field: ToggleField
    item: str = Field(..., min_length=1)


class ScheduleChangeRequest(BaseModel):
    field: Literal["startTime", "endTime", "isClosed"]
    value: Union[bool, str]


class JumpRequest(BaseModel):
    step: OnboardingStep


class StepDefinition(BaseModel):
    id: str
    title: str
    description: str


class CategoryOption(BaseModel):
    id: str
    name: str


class OnboardingState(BaseModel):
    currentStep: str
    currentStepIndex: int
    isFirstStep: bool
    isLastStep: bool
    progressPct: float
    stepValid: bool
    steps: list[StepDefinition]
    formData: OnboardingData
    availableCities: Optional[list[dict[str, Any]]] = None
    categoryOptions: Optional[list[CategoryOption]] = None
    alreadyOnboarded: bool = False
    redirectTo: Optional[str] = None


class PublishResponse(BaseModel):
    success: bool = True
    providerId: Optional[str] = None
    redirectTo: str
    progress: list[str] = Field(default_factory=list)
