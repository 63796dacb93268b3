"""Dashboard routers - client, vendor and admin overview pages"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import get_current_user, get_marketplace, require_admin, require_vendor
from ...schemas import SessionUser
from ...services.marketplace_client import MarketplaceClient
from .service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Dashboards"])


def get_dashboard_service(
    marketplace: MarketplaceClient = Depends(get_marketplace),
    current_user: SessionUser = Depends(get_current_user),
) -> DashboardService:
    """Dependency injection for DashboardService"""
    return DashboardService(marketplace, current_user)


@router.get("/dashboard")
async def client_dashboard(service: DashboardService = Depends(get_dashboard_service)):
    """Greeting, stat cards and recent activity for the client portal"""
    return await service.client_dashboard()


@router.get("/vendor/dashboard")
async def vendor_dashboard(
    current_user: SessionUser = Depends(require_vendor),
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.vendor_dashboard()


@router.get("/vendor/payments")
async def vendor_payments(
    search: Optional[str] = Query(None),
    current_user: SessionUser = Depends(require_vendor),
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.vendor_payments(search)


@router.get("/vendor/calendar")
async def vendor_calendar(
    year: Optional[int] = Query(None, ge=1970, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    current_user: SessionUser = Depends(require_vendor),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Month view of bookings (defaults to the current month)"""
    today = datetime.now()
    return await service.vendor_calendar(year or today.year, month or today.month)


@router.get("/vendor/analytics")
async def vendor_analytics(
    period: str = Query("30d"),
    current_user: SessionUser = Depends(require_vendor),
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.vendor_analytics(period)


@router.get("/admin/analytics")
async def admin_analytics(
    period: str = Query("30d"),
    current_user: SessionUser = Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.admin_analytics(period)
