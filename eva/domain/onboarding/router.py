"""Onboarding router - FastAPI endpoints for the vendor onboarding wizard"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_marketplace
from ...database import get_db
from ...schemas import SessionUser
from ...services.marketplace_client import MarketplaceClient
from .schemas import (
    JumpRequest,
    ListingDraft,
    OnboardingDataUpdate,
    OnboardingState,
    PublishResponse,
    ScheduleChangeRequest,
    TeamMember,
    ToggleItemRequest,
)
from .service import OnboardingPublishError, OnboardingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vendor/onboarding", tags=["Onboarding"])


def get_onboarding_service(
    db: Session = Depends(get_db),
    marketplace: MarketplaceClient = Depends(get_marketplace),
    current_user: SessionUser = Depends(get_current_user),
) -> OnboardingService:
    """Dependency injection for OnboardingService"""
    return OnboardingService(db, marketplace, current_user)


@router.get("", response_model=OnboardingState)
async def get_onboarding_state(service: OnboardingService = Depends(get_onboarding_service)):
    """Current wizard state with cities and category options"""
    return await service.get_state()


@router.patch("/data", response_model=OnboardingState)
async def update_onboarding_data(
    data: OnboardingDataUpdate, service: OnboardingService = Depends(get_onboarding_service)
):
    return service.update(data)


@router.post("/toggle", response_model=OnboardingState)
async def toggle_item(data: ToggleItemRequest, service: OnboardingService = Depends(get_onboarding_service)):
    """Add or remove a category, subcategory or culture tag"""
    return service.toggle(data.field, data.item)


@router.patch("/schedule/{day_idx}", response_model=OnboardingState)
async def change_schedule(
    data: ScheduleChangeRequest,
    day_idx: int = Path(...),
    service: OnboardingService = Depends(get_onboarding_service),
):
    return service.change_schedule(day_idx, data.field, data.value)


@router.post("/listings", response_model=OnboardingState)
async def add_listing(listing: ListingDraft, service: OnboardingService = Depends(get_onboarding_service)):
    return service.add_listing(listing)


@router.delete("/listings/{idx}", response_model=OnboardingState)
async def remove_listing(idx: int, service: OnboardingService = Depends(get_onboarding_service)):
    return service.remove_listing(idx)


@router.post("/team", response_model=OnboardingState)
async def add_team_member(member: TeamMember, service: OnboardingService = Depends(get_onboarding_service)):
    return service.add_team_member(member)


@router.delete("/team/{idx}", response_model=OnboardingState)
async def remove_team_member(idx: int, service: OnboardingService = Depends(get_onboarding_service)):
    return service.remove_team_member(idx)


@router.post("/next", response_model=OnboardingState)
async def next_step(service: OnboardingService = Depends(get_onboarding_service)):
    """Advance one step; rejected while the current step is incomplete"""
    return service.next()


@router.post("/back", response_model=OnboardingState)
async def previous_step(service: OnboardingService = Depends(get_onboarding_service)):
    return service.back()


@router.post("/jump", response_model=OnboardingState)
async def jump_to_step(data: JumpRequest, service: OnboardingService = Depends(get_onboarding_service)):
    return service.jump(data.step)


@router.post("/publish", response_model=PublishResponse)
async def publish(service: OnboardingService = Depends(get_onboarding_service)):
    """Create the provider profile, schedule, team and listings; the draft is kept on failure"""
    try:
        return await service.publish()
    except OnboardingPublishError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"message": e.message, "progress": e.progress},
        ) from e


@router.post("/save-draft", response_model=PublishResponse)
async def save_draft(service: OnboardingService = Depends(get_onboarding_service)):
    """Save the profile unpublished and leave the wizard"""
    return await service.save_draft()


@router.delete("", response_model=OnboardingState)
async def reset_onboarding(service: OnboardingService = Depends(get_onboarding_service)):
    return service.reset()
