"""Catalog router - public search and discovery endpoints"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from ...auth import get_current_user, get_marketplace
from ...rate_limiter import create_rate_limiter
from ...schemas import MessageResponse, SessionUser
from ...services.marketplace_client import MarketplaceClient
from .schemas import ContactForm, FavoriteCreate, InquiryCreate
from .service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Catalog"])

# Public endpoints are rate limited per IP
rate_limit_search = create_rate_limiter(limit=60, window_seconds=60, key_prefix="search")
rate_limit_contact = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="contact")
rate_limit_inquiry = create_rate_limiter(limit=10, window_seconds=3600, key_prefix="inquiry")


def get_catalog_service(marketplace: MarketplaceClient = Depends(get_marketplace)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(marketplace)


@router.get("/search")
async def search_vendors(
    postcode: Optional[str] = Query(None),
    radius: int = Query(5),
    category: Optional[str] = Query(None),
    priceFrom: Optional[float] = Query(None),
    priceTo: Optional[float] = Query(None),
    rating: Optional[float] = Query(None),
    cultureTags: list[str] = Query(default=[]),
    sort: str = Query("distance"),
    page: int = Query(1),
    limit: int = Query(20),
    _: None = Depends(rate_limit_search),
    service: CatalogService = Depends(get_catalog_service),
):
    """Vendor search by postcode radius, category, price, rating and culture tags"""
    return await service.search(
        postcode=postcode,
        radius=radius,
        category=category,
        priceFrom=priceFrom,
        priceTo=priceTo,
        rating=rating,
        cultureTags=cultureTags,
        sort=sort,
        page=page,
        limit=limit,
    )


@router.get("/search/suggestions")
async def search_suggestions(
    q: Optional[str] = Query(None),
    limit: int = Query(8, ge=1, le=20),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.suggestions(q, limit)


@router.get("/categories")
async def list_categories(
    featured: bool = Query(False),
    withSubcategories: bool = Query(False),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.list_categories(featured, withSubcategories)


@router.get("/categories/{slug}")
async def get_category(
    slug: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.get_category(slug, page, limit)


@router.get("/cities")
async def list_cities(service: CatalogService = Depends(get_catalog_service)):
    return await service.list_cities()


@router.get("/locations/{slug}")
async def get_location(
    slug: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.get_location(slug, page, limit)


@router.get("/vendors")
async def list_vendors(
    category: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    verified: Optional[bool] = Query(None),
    featured: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.list_vendors(category, city, verified, featured, search, page, limit)


@router.get("/vendors/{vendor_id}")
async def get_vendor(vendor_id: str, service: CatalogService = Depends(get_catalog_service)):
    """Vendor profile with its listings"""
    return await service.get_vendor(vendor_id)


@router.post("/vendors/{vendor_id}/inquiries", status_code=201)
async def send_inquiry(
    vendor_id: str,
    data: InquiryCreate,
    _: None = Depends(rate_limit_inquiry),
    current_user: SessionUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.send_inquiry(vendor_id, data, current_user)


@router.get("/tags")
async def list_tags(
    type: Literal["all", "popular", "categories"] = Query("all"),
    q: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.list_tags(type, q, limit)


@router.post("/contact", response_model=MessageResponse)
async def submit_contact(
    form: ContactForm,
    _: None = Depends(rate_limit_contact),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.submit_contact(form)


# ============================================================================
# FAVORITES
# ============================================================================


@router.get("/favorites")
async def list_favorites(
    current_user: SessionUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.list_favorites()


@router.post("/favorites", status_code=201)
async def add_favorite(
    data: FavoriteCreate,
    current_user: SessionUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.add_favorite(data.providerId)


@router.delete("/favorites/{provider_id}", response_model=MessageResponse)
async def remove_favorite(
    provider_id: str,
    current_user: SessionUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    await service.remove_favorite(provider_id)
    return {"message": "Removed from favorites"}
