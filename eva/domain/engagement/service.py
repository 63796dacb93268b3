"""Engagement services - inquiries, quotes, reviews and notifications"""

import asyncio
import logging
from typing import Optional

from fastapi import HTTPException

from ...constants import INQUIRY_STATUSES
from ...schemas import SessionUser
from ...services.marketplace_client import (
    MarketplaceClient,
    MarketplaceError,
    item_of,
    items_of,
    raise_not_found,
    total_of,
    without_none,
)
from ...utils.sanitization import sanitize_message, sanitize_string
from .schemas import (
    QuoteAccept,
    QuoteCreate,
    QuoteDecline,
    ReviewCreate,
    ReviewReport,
    ReviewUpdate,
)

logger = logging.getLogger(__name__)

MARK_ALL_BATCH = 100


def _page(payload, key: str) -> dict:
    return {
        key: items_of(payload, key),
        "pagination": payload.get("pagination") if isinstance(payload, dict) else None,
    }


class InquiryService:
    def __init__(self, marketplace: MarketplaceClient):
        self.marketplace = marketplace

    async def list_inquiries(self, status: Optional[str] = None, page: int = 1, limit: int = 20) -> dict:
        if status and status not in INQUIRY_STATUSES:
            raise HTTPException(status_code=400, detail=f"Unknown inquiry status: {status}")
        payload = await self.marketplace.get(
            "/api/inquiries", params={"status": status, "page": page, "limit": limit}
        )
        return _page(payload, "inquiries")

    async def get_inquiry(self, inquiry_id: str) -> dict:
        try:
            payload = await self.marketplace.get(f"/api/inquiries/{inquiry_id}")
        except MarketplaceError as e:
            raise_not_found(e, "Inquiry")
        return item_of(payload, "inquiry")

    async def reply(self, inquiry_id: str, text: str, user: SessionUser) -> dict:
        try:
            result = await self.marketplace.post(
                f"/api/inquiries/{inquiry_id}/messages", json={"text": sanitize_message(text)}
            )
        except MarketplaceError as e:
            raise_not_found(e, "Inquiry")
        logger.info(f"💬 User {user.id} replied to inquiry {inquiry_id}")
        return item_of(result, "message")

    async def update_status(self, inquiry_id: str, status: str) -> dict:
        try:
            result = await self.marketplace.patch(f"/api/inquiries/{inquiry_id}", json={"status": status})
        except MarketplaceError as e:
            raise_not_found(e, "Inquiry")
        logger.info(f"✅ Inquiry {inquiry_id} marked {status}")
        return item_of(result, "inquiry")


class QuoteService:
    def __init__(self, marketplace: MarketplaceClient):
        self.marketplace = marketplace

    async def list_quotes(self, status: Optional[str] = None, page: int = 1, limit: int = 20) -> dict:
        payload = await self.marketplace.get("/api/quotes", params={"status": status, "page": page, "limit": limit})
        return _page(payload, "quotes")

    async def get_quote(self, quote_id: str) -> dict:
        try:
            payload = await self.marketplace.get(f"/api/quotes/{quote_id}")
        except MarketplaceError as e:
            raise_not_found(e, "Quote")
        return item_of(payload, "quote")

    async def accept(self, quote_id: str, data: QuoteAccept, user: SessionUser) -> dict:
        """
        Accept a quote; online payment modes continue straight to checkout

        The booking contact defaults to the signed-in user. Returns the
        created booking and, unless paying cash on delivery, the checkout
        URL for the deposit or full amount. A checkout failure leaves the
        accepted quote in place with checkoutUrl None; payment can be
        started again from the booking.
        """
        body = without_none(
            {
                "paymentMode": data.paymentMode,
                "clientName": sanitize_string((data.clientName or user.name or user.email).strip()),
                "clientEmail": data.clientEmail or user.email,
                "clientPhone": data.clientPhone,
                "eventLocation": sanitize_string(data.eventLocation),
                "specialRequests": sanitize_string(data.specialRequests),
            }
        )
        try:
            result = await self.marketplace.post(f"/api/quotes/{quote_id}/accept", json=body)
        except MarketplaceError as e:
            raise_not_found(e, "Quote")

        booking = (result or {}).get("booking") or {}
        logger.info(f"✅ Quote {quote_id} accepted by user {user.id} ({data.paymentMode})")

        checkout_url = None
        if data.paymentMode != "CASH_ON_DELIVERY" and booking.get("id"):
            payment_type = "DEPOSIT" if data.paymentMode == "DEPOSIT_BALANCE" else "FULL"
            try:
                session = await self.marketplace.post(
                    "/api/stripe/checkout", json={"bookingId": booking["id"], "paymentType": payment_type}
                )
                checkout_url = (session or {}).get("url")
            except MarketplaceError as e:
                logger.error(f"❌ Checkout for booking {booking['id']} (quote {quote_id}) failed: {e.message}")

        return {"booking": booking, "checkoutUrl": checkout_url}

    async def decline(self, quote_id: str, data: QuoteDecline) -> dict:
        body = without_none({"reason": sanitize_string(data.reason) if data.reason else None})
        try:
            result = await self.marketplace.post(f"/api/quotes/{quote_id}/decline", json=body)
        except MarketplaceError as e:
            raise_not_found(e, "Quote")
        logger.info(f"🚫 Quote {quote_id} declined")
        return item_of(result, "quote")

    async def create(self, data: QuoteCreate) -> dict:
        total = data.total
        payload = {
            "inquiryId": data.inquiryId,
            "items": [
                {
                    "name": sanitize_string(item.name),
                    "qty": item.qty,
                    "unitPrice": item.unitPrice,
                    "totalPrice": item.total_price,
                }
                for item in data.items
            ],
            "subtotal": total,
            "tax": 0,
            "discount": 0,
            "totalPrice": total,
            "allowedPaymentModes": data.allowedPaymentModes,
            "depositPercentage": data.depositPercentage,
            "validUntil": data.validUntil.isoformat(),
            "terms": sanitize_string(data.terms),
            "notes": sanitize_string(data.notes),
            "status": "DRAFT",
        }
        result = await self.marketplace.post("/api/quotes", json=without_none(payload))
        logger.info(f"📝 Quote created for inquiry {data.inquiryId} (total {total})")
        return item_of(result, "quote")

    async def send(self, quote_id: str) -> dict:
        try:
            result = await self.marketplace.post(f"/api/quotes/{quote_id}/send")
        except MarketplaceError as e:
            raise_not_found(e, "Quote")
        logger.info(f"📤 Quote {quote_id} sent")
        return item_of(result, "quote")


class ReviewService:
    def __init__(self, marketplace: MarketplaceClient):
        self.marketplace = marketplace

    async def my_reviews(self) -> dict:
        payload = await self.marketplace.get("/api/reviews", params={"mine": "true"})
        return _page(payload, "reviews")

    async def create(self, data: ReviewCreate, user: SessionUser) -> dict:
        try:
            booking = item_of(await self.marketplace.get(f"/api/bookings/{data.bookingId}"), "booking")
        except MarketplaceError as e:
            raise_not_found(e, "Booking")

        if booking.get("status") != "COMPLETED":
            raise HTTPException(status_code=400, detail="You can only review completed bookings")

        provider_id = booking.get("providerId") or (booking.get("provider") or {}).get("id")
        payload = {
            "providerId": provider_id,
            "bookingId": data.bookingId,
            "rating": data.rating,
            "title": sanitize_string(data.title),
            "body": sanitize_string(data.body),
            "authorName": user.name or user.email,
            "authorEmail": user.email,
            "photos": data.photos,
        }
        result = await self.marketplace.post("/api/reviews", json=without_none(payload))
        logger.info(f"⭐ Review ({data.rating}) posted by user {user.id} for provider {provider_id}")
        return item_of(result, "review")

    async def update(self, review_id: str, data: ReviewUpdate) -> dict:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No changes provided")
        for field in ("title", "body"):
            if changes.get(field):
                changes[field] = sanitize_string(changes[field])
        try:
            result = await self.marketplace.patch(f"/api/reviews/{review_id}", json=changes)
        except MarketplaceError as e:
            raise_not_found(e, "Review")
        return item_of(result, "review")

    async def delete(self, review_id: str) -> None:
        try:
            await self.marketplace.delete(f"/api/reviews/{review_id}")
        except MarketplaceError as e:
            raise_not_found(e, "Review")

    async def vendor_reviews(self, rating: Optional[int] = None, page: int = 1, limit: int = 10) -> dict:
        payload = await self.marketplace.get(
            "/api/vendor/reviews", params={"rating": rating, "page": page, "limit": limit}
        )
        result = _page(payload, "reviews")
        if isinstance(payload, dict) and payload.get("stats") is not None:
            result["stats"] = payload["stats"]
        return result

    async def respond(self, review_id: str, content: str) -> dict:
        try:
            result = await self.marketplace.post(
                f"/api/reviews/{review_id}/respond", json={"content": sanitize_message(content)}
            )
        except MarketplaceError as e:
            raise_not_found(e, "Review")
        logger.info(f"💬 Vendor responded to review {review_id}")
        return item_of(result, "response")

    async def report(self, review_id: str, data: ReviewReport) -> dict:
        try:
            await self.marketplace.post(
                f"/api/reviews/{review_id}/report",
                json=without_none({"reason": data.reason, "details": sanitize_string(data.details)}),
            )
        except MarketplaceError as e:
            raise_not_found(e, "Review")
        logger.info(f"🚩 Review {review_id} reported: {data.reason}")
        return {"message": "Review reported. Our team will take a look."}


class NotificationService:
    def __init__(self, marketplace: MarketplaceClient):
        self.marketplace = marketplace

    async def list_notifications(self, unread_only: bool = False, page: int = 1, limit: int = 20) -> dict:
        payload = await self.marketplace.get(
            "/api/notifications",
            params={"unread": "true" if unread_only else None, "page": page, "limit": limit},
        )
        result = _page(payload, "notifications")
        result["unreadCount"] = (payload or {}).get("unreadCount", 0) if isinstance(payload, dict) else 0
        return result

    async def unread_count(self) -> dict:
        payload = await self.marketplace.get("/api/notifications", params={"unread": "true", "limit": 1})
        count = payload.get("unreadCount") if isinstance(payload, dict) else None
        return {"unreadCount": count if count is not None else total_of(payload)}

    async def mark_read(self, notification_id: str) -> dict:
        try:
            result = await self.marketplace.patch(f"/api/notifications/{notification_id}", json={"read": True})
        except MarketplaceError as e:
            raise_not_found(e, "Notification")
        return item_of(result, "notification")

    async def mark_all_read(self) -> dict:
        """
        Mark every unread notification read, one page at a time

        Read notifications drop out of the unread listing, so page 1 is
        fetched again until it holds nothing not already attempted. A failed
        PATCH is counted, not retried.
        """
        attempted: set[str] = set()
        updated = failed = 0
        while True:
            payload = await self.marketplace.get(
                "/api/notifications", params={"unread": "true", "page": 1, "limit": MARK_ALL_BATCH}
            )
            batch = [
                n["id"]
                for n in items_of(payload, "notifications")
                if not n.get("read") and n.get("id") and n["id"] not in attempted
            ]
            if not batch:
                break
            attempted.update(batch)

            results = await asyncio.gather(
                *[self.marketplace.patch(f"/api/notifications/{nid}", json={"read": True}) for nid in batch],
                return_exceptions=True,
            )
            for nid, outcome in zip(batch, results):
                if isinstance(outcome, Exception):
                    failed += 1
                    logger.warning(f"⚠️ Could not mark notification {nid} read: {outcome}")
                else:
                    updated += 1

        return {"updated": updated, "failed": failed}
