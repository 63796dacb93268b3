"""Account service - own profile, preferences and vendor business data"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import cache
from ...models import UserPreference
from ...schemas import SessionUser
from ...services.marketplace_client import (
    MarketplaceClient,
    MarketplaceError,
    item_of,
    items_of,
    raise_not_found,
)
from ...utils.sanitization import sanitize_dict, sanitize_string
from ..onboarding.repository import OnboardingDraftRepository
from .repository import PreferenceRepository
from .schemas import (
    AccountDelete,
    ListingCreate,
    ListingUpdate,
    PasswordChange,
    PreferencesUpdate,
    ProfileUpdate,
    ScheduleReplace,
    TeamMemberCreate,
    VendorProfileUpdate,
)

logger = logging.getLogger(__name__)

PROFILE_TEXT_FIELDS = ["businessName", "description", "address", "city", "postcode", "instagram", "tiktok", "facebook"]
LISTING_TEXT_FIELDS = ["headline", "longDescription", "timeEstimate"]
TEAM_TEXT_FIELDS = ["name", "role", "bio"]


def preferences_view(preference: Optional[UserPreference]) -> dict:
    if preference is None:
        return {"darkMode": False, "emailNotifications": True, "smsNotifications": False}
    return {
        "darkMode": bool(preference.dark_mode),
        "emailNotifications": bool(preference.email_notifications),
        "smsNotifications": bool(preference.sms_notifications),
    }


class AccountService:
    """Profile, password and preference operations for the signed-in user"""

    def __init__(
        self, db: Session, marketplace: MarketplaceClient, user: SessionUser, session_key: Optional[str] = None
    ):
        self.db = db
        self.marketplace = marketplace
        self.user = user
        self.session_key = session_key

    async def get_profile(self) -> dict:
        payload = await self.marketplace.get("/api/users/me")
        return item_of(payload, "user")

    async def update_profile(self, data: ProfileUpdate) -> dict:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No changes provided")
        if changes.get("name"):
            changes["name"] = sanitize_string(changes["name"].strip())

        result = await self.marketplace.patch("/api/users/me", json=changes)
        self._forget_session()
        logger.info(f"👤 User {self.user.id} updated profile: {sorted(changes)}")
        return item_of(result, "user")

    async def change_password(self, data: PasswordChange) -> dict:
        if data.currentPassword == data.newPassword:
            raise HTTPException(status_code=400, detail="New password must be different from the current one")
        try:
            await self.marketplace.post(
                "/api/users/me/password",
                json={"currentPassword": data.currentPassword, "newPassword": data.newPassword},
            )
        except MarketplaceError as e:
            if e.status_code in (400, 401, 403):
                raise HTTPException(status_code=400, detail=e.message or "Current password is incorrect") from e
            raise
        logger.info(f"🔑 User {self.user.id} changed password")
        return {"message": "Password changed successfully"}

    async def delete_account(self, data: AccountDelete) -> dict:
        await self.marketplace.request("DELETE", "/api/auth/delete-account", json={"password": data.password})

        # Local records go only after the marketplace accepted the deletion
        OnboardingDraftRepository.delete_draft(self.db, self.user.id)
        PreferenceRepository.delete(self.db, self.user.id)
        self._forget_session()
        logger.info(f"🗑️ User {self.user.id} deleted their account")
        return {"message": "Account deleted", "redirectTo": "/"}

    def get_preferences(self) -> dict:
        return preferences_view(PreferenceRepository.get(self.db, self.user.id))

    def update_preferences(self, data: PreferencesUpdate) -> dict:
        changes = data.model_dump(exclude_none=True)
        if not changes:
            return self.get_preferences()
        return preferences_view(PreferenceRepository.upsert(self.db, self.user.id, changes))

    def _forget_session(self):
        # The cached SessionUser would keep the old name for up to a minute
        if self.session_key:
            cache.delete(self.session_key)


class VendorAccountService:
    """Business profile, listings, team and weekly schedule of the caller's provider"""

    def __init__(self, marketplace: MarketplaceClient, user: SessionUser):
        self.marketplace = marketplace
        self.user = user
        self._provider_id = user.providerId

    async def get_profile(self) -> dict:
        payload = await self.marketplace.get("/api/vendor/profile")
        provider = (payload or {}).get("provider") if isinstance(payload, dict) else None
        if not provider:
            raise HTTPException(status_code=404, detail="Vendor profile not found. Complete onboarding first.")
        self._provider_id = provider.get("id") or self._provider_id
        return provider

    async def provider_id(self) -> str:
        if not self._provider_id:
            await self.get_profile()
        if not self._provider_id:
            raise HTTPException(status_code=404, detail="Vendor profile not found. Complete onboarding first.")
        return self._provider_id

    async def update_profile(self, data: VendorProfileUpdate) -> dict:
        changes = sanitize_dict(data.model_dump(exclude_unset=True), PROFILE_TEXT_FIELDS)
        if not changes:
            raise HTTPException(status_code=400, detail="No changes provided")
        result = await self.marketplace.put("/api/vendor/profile", json=changes)
        logger.info(f"🏪 Vendor {self.user.id} updated business profile: {sorted(changes)}")
        return item_of(result, "provider")

    # Listings

    async def list_listings(self) -> dict:
        payload = await self.marketplace.get("/api/vendor/listings")
        return {"listings": items_of(payload, "listings")}

    async def get_listing(self, listing_id: str) -> dict:
        try:
            payload = await self.marketplace.get(f"/api/vendor/listings/{listing_id}")
        except MarketplaceError as e:
            raise_not_found(e, "Listing")
        return item_of(payload, "listing")

    async def create_listing(self, data: ListingCreate) -> dict:
        body = sanitize_dict(data.model_dump(), LISTING_TEXT_FIELDS)
        result = await self.marketplace.post("/api/vendor/listings", json=body)
        listing = item_of(result, "listing")
        logger.info(f"📦 Vendor {self.user.id} created listing {listing.get('id')}")
        return listing

    async def update_listing(self, listing_id: str, data: ListingUpdate) -> dict:
        changes = sanitize_dict(data.model_dump(exclude_unset=True), LISTING_TEXT_FIELDS)
        if not changes:
            raise HTTPException(status_code=400, detail="No changes provided")
        try:
            result = await self.marketplace.put(f"/api/vendor/listings/{listing_id}", json=changes)
        except MarketplaceError as e:
            raise_not_found(e, "Listing")
        return item_of(result, "listing")

    async def delete_listing(self, listing_id: str) -> None:
        try:
            await self.marketplace.delete(f"/api/vendor/listings/{listing_id}")
        except MarketplaceError as e:
            raise_not_found(e, "Listing")
        logger.info(f"🗑️ Vendor {self.user.id} deleted listing {listing_id}")

    # Team

    async def list_team(self) -> dict:
        payload = await self.marketplace.get("/api/vendor/team", params={"providerId": await self.provider_id()})
        return {"teamMembers": items_of(payload, "teamMembers")}

    async def add_team_member(self, data: TeamMemberCreate) -> dict:
        body = sanitize_dict(data.model_dump(exclude_none=True), TEAM_TEXT_FIELDS)
        body["providerId"] = await self.provider_id()
        result = await self.marketplace.post("/api/vendor/team", json=body)
        return item_of(result, "teamMember")

    async def remove_team_member(self, member_id: str) -> None:
        try:
            await self.marketplace.delete("/api/vendor/team", params={"id": member_id})
        except MarketplaceError as e:
            raise_not_found(e, "Team member")

    # Weekly schedule

    async def get_schedule(self) -> dict:
        payload = await self.marketplace.get("/api/vendor/schedule", params={"providerId": await self.provider_id()})
        schedules = sorted(items_of(payload, "schedules"), key=lambda s: s.get("dayOfWeek", 0))
        return {"schedules": schedules}

    async def replace_schedule(self, data: ScheduleReplace) -> dict:
        result = await self.marketplace.post(
            "/api/vendor/schedule",
            json={"providerId": await self.provider_id(), "schedules": [d.model_dump() for d in data.schedules]},
        )
        logger.info(f"📅 Vendor {self.user.id} replaced weekly schedule")
        return {"schedules": items_of(result, "schedules")}
