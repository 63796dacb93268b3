"""Account router - own profile, preferences and vendor business data"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...auth import extract_credentials, get_current_user, get_marketplace, require_vendor, session_cache_key
from ...database import get_db
from ...schemas import MessageResponse, SessionUser
from ...services.marketplace_client import MarketplaceClient
from .schemas import (
    AccountDelete,
    ListingCreate,
    ListingUpdate,
    PasswordChange,
    PreferencesResponse,
    PreferencesUpdate,
    ProfileUpdate,
    ScheduleReplace,
    TeamMemberCreate,
    VendorProfileUpdate,
)
from .service import AccountService, VendorAccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/account", tags=["Account"])
vendor_router = APIRouter(prefix="/vendor", tags=["Vendor Business"])


def get_account_service(
    request: Request,
    db: Session = Depends(get_db),
    marketplace: MarketplaceClient = Depends(get_marketplace),
    current_user: SessionUser = Depends(get_current_user),
) -> AccountService:
    return AccountService(db, marketplace, current_user, session_cache_key(extract_credentials(request)))


def get_vendor_account_service(
    marketplace: MarketplaceClient = Depends(get_marketplace),
    current_user: SessionUser = Depends(require_vendor),
) -> VendorAccountService:
    return VendorAccountService(marketplace, current_user)


# ============================================================================
# PROFILE & PREFERENCES
# ============================================================================


@router.get("/profile")
async def get_profile(service: AccountService = Depends(get_account_service)):
    return await service.get_profile()


@router.patch("/profile")
async def update_profile(data: ProfileUpdate, service: AccountService = Depends(get_account_service)):
    return await service.update_profile(data)


@router.post("/password", response_model=MessageResponse)
async def change_password(data: PasswordChange, service: AccountService = Depends(get_account_service)):
    return await service.change_password(data)


@router.delete("")
async def delete_account(data: AccountDelete, service: AccountService = Depends(get_account_service)):
    """Permanently delete the caller's marketplace account and local portal data"""
    return await service.delete_account(data)


@router.get("/preferences", response_model=PreferencesResponse)
def get_preferences(service: AccountService = Depends(get_account_service)):
    return service.get_preferences()


@router.patch("/preferences", response_model=PreferencesResponse)
def update_preferences(data: PreferencesUpdate, service: AccountService = Depends(get_account_service)):
    return service.update_preferences(data)


# ============================================================================
# VENDOR BUSINESS PROFILE
# ============================================================================


@vendor_router.get("/profile")
async def get_vendor_profile(service: VendorAccountService = Depends(get_vendor_account_service)):
    return await service.get_profile()


@vendor_router.put("/profile")
async def update_vendor_profile(
    data: VendorProfileUpdate, service: VendorAccountService = Depends(get_vendor_account_service)
):
    return await service.update_profile(data)


@vendor_router.get("/listings")
async def list_listings(service: VendorAccountService = Depends(get_vendor_account_service)):
    return await service.list_listings()


@vendor_router.post("/listings", status_code=201)
async def create_listing(data: ListingCreate, service: VendorAccountService = Depends(get_vendor_account_service)):
    return await service.create_listing(data)


@vendor_router.get("/listings/{listing_id}")
async def get_listing(listing_id: str, service: VendorAccountService = Depends(get_vendor_account_service)):
    return await service.get_listing(listing_id)


@vendor_router.put("/listings/{listing_id}")
async def update_listing(
    listing_id: str, data: ListingUpdate, service: VendorAccountService = Depends(get_vendor_account_service)
):
    return await service.update_listing(listing_id, data)


@vendor_router.delete("/listings/{listing_id}", response_model=MessageResponse)
async def delete_listing(listing_id: str, service: VendorAccountService = Depends(get_vendor_account_service)):
    await service.delete_listing(listing_id)
    return {"message": "Listing deleted"}


@vendor_router.get("/team")
async def list_team(service: VendorAccountService = Depends(get_vendor_account_service)):
    return await service.list_team()


@vendor_router.post("/team", status_code=201)
async def add_team_member(
    data: TeamMemberCreate, service: VendorAccountService = Depends(get_vendor_account_service)
):
    return await service.add_team_member(data)


@vendor_router.delete("/team/{member_id}", response_model=MessageResponse)
async def remove_team_member(member_id: str, service: VendorAccountService = Depends(get_vendor_account_service)):
    await service.remove_team_member(member_id)
    return {"message": "Team member removed"}


@vendor_router.get("/schedule")
async def get_schedule(service: VendorAccountService = Depends(get_vendor_account_service)):
    return await service.get_schedule()


@vendor_router.put("/schedule")
async def replace_schedule(
    data: ScheduleReplace, service: VendorAccountService = Depends(get_vendor_account_service)
):
    return await service.replace_schedule(data)
