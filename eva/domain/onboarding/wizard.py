"""
Vendor onboarding wizard

Nine ordered steps. Moving forward is gated by the current step's validation;
going back and jumping are free. The wizard holds no I/O - the service layer
loads and persists it.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from .schemas import (
    CategoryOption,
    ListingDraft,
    OnboardingData,
    OnboardingDataUpdate,
    StepDefinition,
    TeamMember,
    WeeklyScheduleDay,
)

logger = logging.getLogger(__name__)

STEPS = [
    StepDefinition(id="basics", title="Business Basics", description="Tell us about your business"),
    StepDefinition(id="location", title="Location & Area", description="Where do you operate?"),
    StepDefinition(id="categories", title="Categories & Tags", description="What services do you offer?"),
    StepDefinition(id="social", title="Social Media", description="Connect your social profiles (optional)"),
    StepDefinition(id="media", title="Photos & Media", description="Showcase your work"),
    StepDefinition(id="listings", title="Services & Packages", description="Add services or packages you offer"),
    StepDefinition(id="team", title="Team Members", description="Add your team (optional)"),
    StepDefinition(id="schedule", title="Weekly Schedule", description="Set your working hours"),
    StepDefinition(id="review", title="Review & Publish", description="Final review before going live"),
]

STEP_IDS = [step.id for step in STEPS]

DEFAULT_CATEGORY_OPTIONS = [
    CategoryOption(id="venues", name="Venues"),
    CategoryOption(id="photographers", name="Photographers"),
    CategoryOption(id="caterers", name="Caterers"),
    CategoryOption(id="music-djs", name="Music & DJs"),
    CategoryOption(id="florists", name="Florists"),
    CategoryOption(id="event-planners", name="Event Planners"),
    CategoryOption(id="bakers", name="Bakers"),
    CategoryOption(id="decorators", name="Decorators"),
    CategoryOption(id="makeup", name="Makeup"),
]

CULTURE_TAGS = [
    CategoryOption(id="nigerian", name="Nigerian"),
    CategoryOption(id="ghanaian", name="Ghanaian"),
    CategoryOption(id="jamaican", name="Jamaican"),
    CategoryOption(id="indian", name="Indian"),
    CategoryOption(id="pakistani", name="Pakistani"),
    CategoryOption(id="caribbean", name="Caribbean"),
    CategoryOption(id="african", name="African"),
    CategoryOption(id="asian", name="Asian"),
    CategoryOption(id="western", name="Western/Traditional"),
    CategoryOption(id="multicultural", name="Multicultural"),
]

RADIUS_OPTIONS = [5, 10, 15, 20, 25, 30, 50, 100]


class WizardError(ValueError):
    """Rejected wizard operation; the message is shown to the vendor"""


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def listing_is_complete(listing: ListingDraft) -> bool:
    return not (
        _blank(listing.headline)
        or not listing.price
        or listing.price <= 0
        or _blank(listing.timeEstimate)
        or _blank(listing.coverImageUrl)
        or _blank(listing.longDescription)
    )


class OnboardingWizard:
    """Step navigation and form state for one vendor"""

    def __init__(self, data: Optional[OnboardingData] = None, current_step: str = "basics"):
        self.data = data or OnboardingData()
        self.current_step = current_step if current_step in STEP_IDS else "basics"

    # ── Derived ────────────────────────────────────────────────────
    @property
    def current_step_index(self) -> int:
        return STEP_IDS.index(self.current_step)

    @property
    def is_first_step(self) -> bool:
        return self.current_step_index == 0

    @property
    def is_last_step(self) -> bool:
        return self.current_step_index == len(STEPS) - 1

    @property
    def progress_pct(self) -> float:
        return (self.current_step_index + 1) / len(STEPS) * 100

    # ── Form helpers ───────────────────────────────────────────────
    def update(self, updates: OnboardingDataUpdate) -> None:
        changes = updates.model_dump(exclude_unset=True)
        if not changes:
            return
        merged = {**self.data.model_dump(), **changes}
        try:
            self.data = OnboardingData.model_validate(merged)
        except ValidationError as e:
            # null is only accepted where the saved form allows it (priceFrom)
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise WizardError(f"Invalid value for {', '.join(fields)}") from e

    def toggle(self, field: str, item: str) -> None:
        values: list[str] = getattr(self.data, field)
        if item in values:
            setattr(self.data, field, [v for v in values if v != item])
        else:
            setattr(self.data, field, [*values, item])

    def change_schedule(self, day_idx: int, field: str, value: Any) -> None:
        schedule = self.data.weeklySchedule
        if not 0 <= day_idx < len(schedule):
            raise WizardError(f"No schedule entry for day {day_idx}")

        day = schedule[day_idx].model_dump()
        day[field] = value
        try:
            schedule[day_idx] = WeeklyScheduleDay.model_validate(day)
        except ValueError as e:
            raise WizardError(f"Invalid value for {field}") from e

    def add_listing(self, listing: ListingDraft) -> None:
        if not listing_is_complete(listing):
            raise WizardError(
                "A service needs a headline, description, price, time estimate and cover image"
            )
        self.data.listings.append(listing)

    def remove_listing(self, idx: int) -> None:
        self.data.listings = [l for i, l in enumerate(self.data.listings) if i != idx]

    def add_team_member(self, member: TeamMember) -> None:
        if _blank(member.name):
            raise WizardError("Team member name is required")
        self.data.teamMembers.append(member.model_copy())

    def remove_team_member(self, idx: int) -> None:
        self.data.teamMembers = [m for i, m in enumerate(self.data.teamMembers) if i != idx]

    # ── Validation ─────────────────────────────────────────────────
    def is_step_valid(self, step: Optional[str] = None) -> bool:
        step = step or self.current_step
        data = self.data
        if step == "basics":
            return not _blank(data.businessName) and not _blank(data.description)
        if step == "location":
            return not _blank(data.city) and not _blank(data.postcode)
        if step == "categories":
            return len(data.categories) > 0
        if step == "media":
            return not _blank(data.coverImage)
        if step == "listings":
            return len(data.listings) >= 1
        if step == "schedule":
            return len(data.weeklySchedule) == 7
        # social, team and review are optional
        return True

    def first_invalid_step(self) -> Optional[str]:
        for step_id in STEP_IDS:
            if not self.is_step_valid(step_id):
                return step_id
        return None

    # ── Navigation ─────────────────────────────────────────────────
    def next(self) -> None:
        if not self.is_step_valid():
            title = STEPS[self.current_step_index].title
            raise WizardError(f"Please complete '{title}' before continuing")
        if self.current_step_index + 1 < len(STEPS):
            self.current_step = STEP_IDS[self.current_step_index + 1]

    def back(self) -> None:
        if self.current_step_index - 1 >= 0:
            self.current_step = STEP_IDS[self.current_step_index - 1]

    def jump(self, step: str) -> None:
        if step not in STEP_IDS:
            raise WizardError(f"Unknown onboarding step: {step}")
        self.current_step = step

    def state(self) -> dict:
        return {
            "currentStep": self.current_step,
            "currentStepIndex": self.current_step_index,
            "isFirstStep": self.is_first_step,
            "isLastStep": self.is_last_step,
            "progressPct": round(self.progress_pct, 2),
            "stepValid": self.is_step_valid(),
            "steps": STEPS,
            "formData": self.data,
        }
