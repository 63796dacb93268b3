"""Catalog service - public discovery of vendors, categories and locations"""

import asyncio
import logging
from typing import Optional

from fastapi import HTTPException
from pydantic import ValidationError

from ...schemas import SessionUser
from ...services.marketplace_client import (
    MarketplaceClient,
    MarketplaceError,
    item_of,
    items_of,
    raise_not_found,
    without_none,
)
from ...services.reference_data import get_categories, get_cities, get_tags
from ...utils.sanitization import sanitize_string
from .schemas import ContactForm, InquiryCreate, SearchQuery

logger = logging.getLogger(__name__)


class CatalogService:
    """Service layer for catalog browsing"""

    def __init__(self, marketplace: MarketplaceClient):
        self.marketplace = marketplace

    async def search(self, **filters) -> dict:
        try:
            query = SearchQuery(**filters)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=e.errors()[0]["msg"]) from e
        return await self.marketplace.get("/api/search", params=query.to_params())

    async def suggestions(self, q: Optional[str], limit: int = 8) -> dict:
        if not q or len(q.strip()) < 2:
            return {"suggestions": []}
        return await self.marketplace.get("/api/search/suggestions", params={"q": q.strip(), "limit": limit})

    async def list_categories(self, featured: bool = False, with_subcategories: bool = False) -> dict:
        params = {}
        if featured:
            params["featured"] = "true"
        if with_subcategories:
            params["withSubcategories"] = "true"
        return {"categories": await get_categories(self.marketplace, params or None)}

    async def get_category(self, slug: str, page: int = 1, limit: int = 20) -> dict:
        try:
            category, providers = await asyncio.gather(
                self.marketplace.get(f"/api/categories/{slug}"),
                self.marketplace.get(f"/api/categories/{slug}/providers", params={"page": page, "limit": limit}),
            )
        except MarketplaceError as e:
            raise_not_found(e, "Category")
        return {
            "category": item_of(category, "category"),
            "vendors": items_of(providers, "providers"),
            "pagination": (providers or {}).get("pagination") if isinstance(providers, dict) else None,
        }

    async def list_cities(self) -> dict:
        return {"cities": await get_cities(self.marketplace)}

    async def get_location(self, slug: str, page: int = 1, limit: int = 20) -> dict:
        try:
            city, providers = await asyncio.gather(
                self.marketplace.get(f"/api/cities/{slug}"),
                self.marketplace.get(f"/api/cities/{slug}/providers", params={"page": page, "limit": limit}),
            )
        except MarketplaceError as e:
            raise_not_found(e, "Location")
        return {
            "city": item_of(city, "city"),
            "vendors": items_of(providers, "providers"),
            "pagination": (providers or {}).get("pagination") if isinstance(providers, dict) else None,
        }

    async def list_vendors(
        self,
        category: Optional[str] = None,
        city: Optional[str] = None,
        verified: Optional[bool] = None,
        featured: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        params = {
            "category": category,
            "city": city,
            "verified": "true" if verified else None,
            "featured": "true" if featured else None,
            "search": search,
            "page": page,
            "limit": limit,
        }
        payload = await self.marketplace.get("/api/providers", params=params)
        return {
            "vendors": items_of(payload, "providers"),
            "pagination": payload.get("pagination") if isinstance(payload, dict) else None,
        }

    async def get_vendor(self, vendor_id: str) -> dict:
        vendor_result, listings_result = await asyncio.gather(
            self.marketplace.get(f"/api/providers/{vendor_id}"),
            self.marketplace.get(f"/api/providers/{vendor_id}/listings"),
            return_exceptions=True,
        )
        if isinstance(vendor_result, MarketplaceError):
            raise_not_found(vendor_result, "Vendor")
        if isinstance(vendor_result, BaseException):
            raise vendor_result

        listings: list = []
        if isinstance(listings_result, BaseException):
            logger.warning(f"⚠️ Listings unavailable for vendor {vendor_id}: {listings_result}")
        else:
            listings = items_of(listings_result, "listings")

        return {"vendor": item_of(vendor_result, "provider"), "listings": listings}

    async def list_tags(self, type: str = "all", q: Optional[str] = None, limit: int = 50) -> dict:
        params = {"type": type, "q": q, "limit": limit}
        return {"tags": await get_tags(self.marketplace, params)}

    # ── Client favorites ───────────────────────────────────────────
    async def list_favorites(self) -> dict:
        payload = await self.marketplace.get("/api/favorites")
        return {"favorites": items_of(payload, "favorites")}

    async def add_favorite(self, provider_id: str) -> dict:
        try:
            return await self.marketplace.post("/api/favorites", json={"providerId": provider_id})
        except MarketplaceError as e:
            raise_not_found(e, "Vendor")

    async def remove_favorite(self, provider_id: str) -> None:
        await self.marketplace.delete(f"/api/favorites/{provider_id}")

    # ── Contact and inquiries ──────────────────────────────────────
    async def submit_contact(self, form: ContactForm) -> dict:
        payload = {
            "name": sanitize_string(form.name),
            "email": form.email,
            "phone": form.phone,
            "subject": sanitize_string(form.subject),
            "message": sanitize_string(form.message),
        }
        await self.marketplace.post("/api/contact", json=without_none(payload))
        logger.info(f"📧 Contact form submitted by {form.email}")
        return {"message": "Thank you for your message. We'll get back to you soon."}

    async def send_inquiry(self, vendor_id: str, data: InquiryCreate, user: SessionUser) -> dict:
        payload = {
            "providerId": vendor_id,
            "fromName": user.name or user.email,
            "fromEmail": user.email,
            "fromPhone": data.fromPhone,
            "eventDate": data.eventDate.isoformat(),
            "eventType": sanitize_string(data.eventType),
            "guestsCount": data.guestsCount,
            "budgetRange": data.budgetRange,
            "location": sanitize_string(data.location),
            "message": sanitize_string(data.message),
            "searchPostcode": data.searchPostcode,
            "searchRadius": data.searchRadius,
        }
        try:
            result = await self.marketplace.post("/api/inquiries", json=without_none(payload))
        except MarketplaceError as e:
            raise_not_found(e, "Vendor")
        logger.info(f"📨 Inquiry sent by user {user.id} to vendor {vendor_id}")
        return item_of(result, "inquiry")
