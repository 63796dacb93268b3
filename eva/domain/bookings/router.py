"""Booking routers - client, vendor and admin booking endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import get_current_user, get_marketplace, require_admin, require_vendor
from ...schemas import MessageResponse, SessionUser
from ...services.marketplace_client import MarketplaceClient
from .schemas import (
    BookingCompleteRequest,
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingStatusUpdate,
    CheckoutResponse,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])
vendor_router = APIRouter(prefix="/vendor/bookings", tags=["Vendor Bookings"])
admin_router = APIRouter(prefix="/admin/bookings", tags=["Admin Bookings"])


def get_booking_service(marketplace: MarketplaceClient = Depends(get_marketplace)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(marketplace)


# ============================================================================
# CLIENT
# ============================================================================


@router.get("", response_model=BookingListResponse)
async def list_my_bookings(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: SessionUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.list_bookings(status=status, page=page, limit=limit)


@router.post("", status_code=201)
async def request_booking(
    data: BookingCreate,
    current_user: SessionUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Request a booking for one or more of a vendor's listings"""
    return await service.create_booking(data, current_user)


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(
    booking_id: str,
    current_user: SessionUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_booking_detail(booking_id)


@router.post("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: str,
    current_user: SessionUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.cancel_booking(booking_id)


@router.post("/{booking_id}/pay", response_model=CheckoutResponse)
async def pay_booking(
    booking_id: str,
    current_user: SessionUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Start checkout for whatever payment is currently due"""
    return await service.start_payment(booking_id)


# ============================================================================
# VENDOR
# ============================================================================


@vendor_router.get("", response_model=BookingListResponse)
async def list_vendor_bookings(
    status: Optional[str] = Query(None),
    upcoming: bool = Query(False),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: SessionUser = Depends(require_vendor),
    service: BookingService = Depends(get_booking_service),
):
    return await service.list_bookings(status=status, page=page, limit=limit, upcoming=upcoming)


@vendor_router.patch("/{booking_id}/status")
async def update_vendor_booking_status(
    booking_id: str,
    data: BookingStatusUpdate,
    current_user: SessionUser = Depends(require_vendor),
    service: BookingService = Depends(get_booking_service),
):
    return await service.update_status(booking_id, data.status)


@vendor_router.post("/{booking_id}/complete")
async def complete_booking(
    booking_id: str,
    data: Optional[BookingCompleteRequest] = None,
    current_user: SessionUser = Depends(require_vendor),
    service: BookingService = Depends(get_booking_service),
):
    return await service.complete_booking(booking_id, data or BookingCompleteRequest())


# ============================================================================
# ADMIN
# ============================================================================


@admin_router.get("", response_model=BookingListResponse)
async def admin_list_bookings(
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: SessionUser = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Bookings with per-status counts; search matches id, client and business name"""
    return await service.admin_list_bookings(status=status, search=search, page=page, limit=limit)


@admin_router.patch("/{booking_id}/status")
async def admin_update_booking_status(
    booking_id: str,
    data: BookingStatusUpdate,
    current_user: SessionUser = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    return await service.update_status(booking_id, data.status)


@admin_router.delete("/{booking_id}", response_model=MessageResponse)
async def admin_delete_booking(
    booking_id: str,
    current_user: SessionUser = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    await service.delete_booking(booking_id)
    return {"message": "Booking deleted successfully"}
