"""Onboarding service - Draft persistence and publishing for the vendor wizard"""

import asyncio
import logging
from typing import Callable

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...schemas import SessionUser
from ...services.marketplace_client import MarketplaceClient, MarketplaceError
from ...services.reference_data import get_categories, get_cities
from ...utils.sanitization import sanitize_dict
from .repository import OnboardingDraftRepository
from .schemas import (
    CategoryOption,
    ListingDraft,
    OnboardingData,
    OnboardingDataUpdate,
    TeamMember,
)
from .wizard import DEFAULT_CATEGORY_OPTIONS, STEPS, OnboardingWizard, WizardError

logger = logging.getLogger(__name__)

TEXT_FIELDS = [
    "businessName",
    "description",
    "address",
    "city",
    "postcode",
    "instagram",
    "tiktok",
    "facebook",
    "headline",
    "longDescription",
    "timeEstimate",
    "name",
]

PROGRESS_PROFILE = "Creating your business profile..."
PROGRESS_SCHEDULE = "Setting up your schedule..."
PROGRESS_TEAM = "Adding your team..."
PROGRESS_LISTINGS = "Publishing your services..."


class OnboardingPublishError(Exception):
    def __init__(self, message: str, progress: list[str], status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.progress = progress
        self.status_code = status_code


class OnboardingService:
    """Service layer for the vendor onboarding wizard"""

    def __init__(self, db: Session, marketplace: MarketplaceClient, user: SessionUser):
        self.db = db
        self.marketplace = marketplace
        self.user = user
        self.repo = OnboardingDraftRepository()

    # ── Draft persistence ──────────────────────────────────────────
    def load_wizard(self) -> OnboardingWizard:
        draft = self.repo.get_draft(self.db, self.user.id)
        if draft is None:
            return OnboardingWizard()

        try:
            data = OnboardingData.model_validate(draft.form_data or {})
        except ValidationError as e:
            logger.error(f"❌ Corrupt onboarding draft for user {self.user.id}, starting over: {e}")
            data = OnboardingData()
        return OnboardingWizard(data, draft.current_step)

    def save(self, wizard: OnboardingWizard) -> OnboardingWizard:
        self.repo.save_draft(self.db, self.user.id, wizard.current_step, wizard.data.model_dump())
        return wizard

    def mutate(self, operation: Callable[[OnboardingWizard], None]) -> dict:
        """Apply one wizard operation and persist the result"""
        wizard = self.load_wizard()
        try:
            operation(wizard)
        except WizardError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        self.save(wizard)
        return wizard.state()

    def reset(self) -> dict:
        self.repo.delete_draft(self.db, self.user.id)
        logger.info(f"🗑️ Onboarding draft reset for user {self.user.id}")
        return OnboardingWizard().state()

    # ── State ──────────────────────────────────────────────────────
    async def _has_provider(self) -> bool:
        try:
            payload = await self.marketplace.get("/api/vendor/profile")
        except MarketplaceError:
            # No profile yet
            return False
        return bool(isinstance(payload, dict) and payload.get("provider"))

    async def _reference_data(self) -> tuple[list, list[CategoryOption]]:
        cities_result, categories_result = await asyncio.gather(
            get_cities(self.marketplace),
            get_categories(self.marketplace),
            return_exceptions=True,
        )

        cities: list = []
        if isinstance(cities_result, Exception):
            logger.error(f"❌ Failed to fetch cities for onboarding: {cities_result}")
        else:
            cities = cities_result

        options = list(DEFAULT_CATEGORY_OPTIONS)
        if isinstance(categories_result, Exception):
            logger.error(f"❌ Failed to fetch categories for onboarding: {categories_result}")
        elif categories_result:
            options = [
                CategoryOption(id=c.get("slug") or c.get("id"), name=c.get("name", ""))
                for c in categories_result
                if c.get("slug") or c.get("id")
            ] or options
        return cities, options

    async def get_state(self) -> dict:
        wizard = self.load_wizard()
        state = wizard.state()

        if await self._has_provider():
            state.update(alreadyOnboarded=True, redirectTo="/vendor")
            return state

        cities, options = await self._reference_data()
        state.update(availableCities=cities, categoryOptions=options)
        return state

    # ── Form operations ────────────────────────────────────────────
    def update(self, updates: OnboardingDataUpdate) -> dict:
        return self.mutate(lambda w: w.update(updates))

    def toggle(self, field: str, item: str) -> dict:
        return self.mutate(lambda w: w.toggle(field, item))

    def change_schedule(self, day_idx: int, field: str, value) -> dict:
        return self.mutate(lambda w: w.change_schedule(day_idx, field, value))

    def add_listing(self, listing: ListingDraft) -> dict:
        return self.mutate(lambda w: w.add_listing(listing))

    def remove_listing(self, idx: int) -> dict:
        return self.mutate(lambda w: w.remove_listing(idx))

    def add_team_member(self, member: TeamMember) -> dict:
        return self.mutate(lambda w: w.add_team_member(member))

    def remove_team_member(self, idx: int) -> dict:
        return self.mutate(lambda w: w.remove_team_member(idx))

    def next(self) -> dict:
        return self.mutate(lambda w: w.next())

    def back(self) -> dict:
        return self.mutate(lambda w: w.back())

    def jump(self, step: str) -> dict:
        return self.mutate(lambda w: w.jump(step))

    # ── Publishing ─────────────────────────────────────────────────
    def _profile_payload(self, data: OnboardingData, published: bool) -> dict:
        payload = sanitize_dict(data.model_dump(), TEXT_FIELDS)
        payload["isPublished"] = published
        return payload

    async def publish(self) -> dict:
        wizard = self.load_wizard()
        invalid = wizard.first_invalid_step()
        if invalid:
            title = next(s.title for s in STEPS if s.id == invalid)
            raise HTTPException(
                status_code=400,
                detail={"message": f"Please complete '{title}' before publishing", "step": invalid},
            )

        data = wizard.data
        progress: list[str] = []
        logger.info(f"🚀 Publishing onboarding for user {self.user.id}")

        try:
            # 1. Provider profile
            progress.append(PROGRESS_PROFILE)
            created = await self.marketplace.post(
                "/api/vendor/profile", json=self._profile_payload(data, published=True)
            )
            provider = (created or {}).get("provider") or {}
            provider_id = provider.get("id")
            if not provider_id:
                raise OnboardingPublishError("Provider ID missing after creation", progress)

            # 2. Weekly schedule (bulk)
            progress.append(PROGRESS_SCHEDULE)
            await self.marketplace.post(
                "/api/vendor/schedule",
                json={
                    "providerId": provider_id,
                    "schedules": [day.model_dump() for day in data.weeklySchedule],
                },
            )

            # 3. Team members (bulk)
            members = [m for m in data.teamMembers if m.name.strip()]
            if members:
                progress.append(PROGRESS_TEAM)
                await self.marketplace.post(
                    "/api/vendor/team",
                    json={
                        "providerId": provider_id,
                        "members": [
                            sanitize_dict({"name": m.name, "imageUrl": m.photo}, ["name"])
                            for m in members
                        ],
                    },
                )

            # 4. Listings
            if data.listings:
                progress.append(PROGRESS_LISTINGS)
                results = await asyncio.gather(
                    *[
                        self.marketplace.post(
                            "/api/vendor/listings",
                            json={"providerId": provider_id, **sanitize_dict(l.model_dump(), TEXT_FIELDS)},
                        )
                        for l in data.listings
                    ],
                    return_exceptions=True,
                )
                failures = [r for r in results if isinstance(r, Exception)]
                if failures:
                    logger.error(f"❌ {len(failures)} listing(s) failed for provider {provider_id}: {failures[0]}")
                    raise OnboardingPublishError("Failed to save one or more listings", progress)

        except MarketplaceError as e:
            logger.error(f"❌ Onboarding publish failed at '{progress[-1]}': {e.message}")
            status_code = e.status_code if 400 <= e.status_code < 500 else 502
            raise OnboardingPublishError(e.message, progress, status_code) from e

        self.repo.delete_draft(self.db, self.user.id)
        logger.info(f"✅ Vendor {provider_id} onboarded by user {self.user.id}")
        return {
            "success": True,
            "providerId": str(provider_id),
            "redirectTo": "/vendor?welcome=true",
            "progress": progress,
        }

    async def save_draft(self) -> dict:
        wizard = self.load_wizard()
        created = await self.marketplace.post(
            "/api/vendor/profile", json=self._profile_payload(wizard.data, published=False)
        )
        self.repo.delete_draft(self.db, self.user.id)
        provider = (created or {}).get("provider") or {}
        logger.info(f"💾 Onboarding saved as unpublished profile for user {self.user.id}")
        return {
            "success": True,
            "providerId": str(provider["id"]) if provider.get("id") else None,
            "redirectTo": "/vendor",
            "progress": ["Saving draft..."],
        }
