"""Booking service - Lifecycle rules applied on top of the marketplace booking API"""

import asyncio
import logging
from typing import Optional

from fastapi import HTTPException

from ...schemas import SessionUser
from ...services.marketplace_client import MarketplaceClient, MarketplaceError, item_of, items_of, without_none
from ...utils.sanitization import sanitize_string
from .lifecycle import (
    BOOKING_STATUSES,
    CLIENT_CANCELLABLE,
    can_cancel,
    can_complete,
    get_payment_action,
    is_past,
    is_upcoming,
    status_config,
    validate_status_transition,
)
from .schemas import BookingCompleteRequest, BookingCreate

logger = logging.getLogger(__name__)


def decorate(booking: dict) -> dict:
    """Attach display label and badge color"""
    config = status_config(booking.get("status", ""))
    return {**booking, "statusLabel": config["label"], "statusColor": config["color"]}


def matches_search(booking: dict, query: str) -> bool:
    query = query.lower()
    user = booking.get("user") or {}
    provider = booking.get("provider") or {}
    candidates = [
        booking.get("id"),
        user.get("name") or booking.get("clientName"),
        user.get("email") or booking.get("clientEmail"),
        provider.get("businessName"),
    ]
    return any(query in str(value).lower() for value in candidates if value)


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, marketplace: MarketplaceClient):
        self.marketplace = marketplace

    async def get_booking(self, booking_id: str) -> dict:
        payload = await self.marketplace.get(f"/api/bookings/{booking_id}")
        booking = item_of(payload, "booking")
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    async def list_bookings(
        self,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        upcoming: Optional[bool] = None,
    ) -> dict:
        if status and status not in BOOKING_STATUSES:
            raise HTTPException(status_code=400, detail=f"Unknown booking status: {status}")

        payload = await self.marketplace.get(
            "/api/bookings",
            params={
                "status": status,
                "page": page,
                "limit": limit,
                "upcoming": "true" if upcoming else None,
            },
        )
        return {
            "bookings": [decorate(b) for b in items_of(payload, "bookings")],
            "pagination": (payload or {}).get("pagination") if isinstance(payload, dict) else None,
        }

    async def get_booking_detail(self, booking_id: str) -> dict:
        booking_result, timeline_result = await asyncio.gather(
            self.get_booking(booking_id),
            self.marketplace.get(f"/api/bookings/{booking_id}/timeline"),
            return_exceptions=True,
        )
        if isinstance(booking_result, BaseException):
            raise booking_result

        timeline: list = []
        if isinstance(timeline_result, BaseException):
            logger.warning(f"⚠️ Timeline unavailable for booking {booking_id}: {timeline_result}")
        else:
            timeline = items_of(timeline_result, "timeline")

        booking = booking_result
        return {
            "booking": decorate(booking),
            "timeline": timeline,
            "statusConfig": status_config(booking.get("status", "")),
            "canCancel": can_cancel(booking),
            "paymentAction": get_payment_action(booking),
            "isUpcoming": is_upcoming(booking),
            "isPast": is_past(booking),
        }

    async def create_booking(self, data: BookingCreate, user: SessionUser) -> dict:
        services = [s.model_dump() for s in data.services]
        pricing_total = sum(s.minPrice for s in data.services)
        payload = {
            "providerId": data.providerId,
            "services": services,
            "clientName": user.name or "",
            "clientEmail": user.email,
            "clientPhone": data.clientPhone or "",
            "eventDate": data.eventDate.isoformat(),
            "eventLocation": sanitize_string(data.eventLocation),
            "guestsCount": data.guestsCount,
            "specialRequests": sanitize_string(data.specialRequests),
            "paymentMode": data.paymentMode,
            "pricingTotal": pricing_total,
        }
        logger.info(f"📥 Booking request from user {user.id} for provider {data.providerId}")
        result = await self.marketplace.post("/api/bookings", json=without_none(payload))
        return item_of(result, "booking")

    async def cancel_booking(self, booking_id: str) -> dict:
        booking = await self.get_booking(booking_id)
        if not can_cancel(booking):
            raise HTTPException(
                status_code=409,
                detail=f"Bookings can only be cancelled while {', '.join(CLIENT_CANCELLABLE)}",
            )
        result = await self.marketplace.post(f"/api/bookings/{booking_id}/cancel")
        logger.info(f"🚫 Booking {booking_id} cancelled by client")
        return decorate(item_of(result, "booking") or {**booking, "status": "CANCELLED"})

    async def start_payment(self, booking_id: str) -> dict:
        booking = await self.get_booking(booking_id)
        action = get_payment_action(booking)
        if action is None:
            raise HTTPException(status_code=409, detail="No payment is due for this booking")

        session = await self.marketplace.post(
            "/api/stripe/checkout", json={"bookingId": booking_id, "paymentType": action["type"]}
        )
        logger.info(f"💳 Checkout started for booking {booking_id} ({action['type']})")
        return {"checkoutUrl": (session or {}).get("url"), "paymentAction": action}

    async def update_status(self, booking_id: str, new_status: str) -> dict:
        booking = await self.get_booking(booking_id)
        current = booking.get("status", "")
        if not validate_status_transition(current, new_status):
            raise HTTPException(
                status_code=409,
                detail=f"Cannot change booking status from {current} to {new_status}",
            )
        if current == new_status:
            return decorate(booking)

        result = await self.marketplace.patch(f"/api/bookings/{booking_id}", json={"status": new_status})
        logger.info(f"✅ Booking {booking_id} transitioned: {current} → {new_status}")
        return decorate(item_of(result, "booking") or {**booking, "status": new_status})

    async def complete_booking(self, booking_id: str, data: BookingCompleteRequest) -> dict:
        booking = await self.get_booking(booking_id)
        if not can_complete(booking):
            raise HTTPException(status_code=409, detail="Only confirmed bookings can be marked as completed")

        notes = sanitize_string(data.completionNotes) if data.completionNotes else None
        result = await self.marketplace.post(
            f"/api/bookings/{booking_id}/complete", json=without_none({"completionNotes": notes})
        )
        logger.info(f"🏁 Booking {booking_id} completed")
        return decorate(item_of(result, "booking") or {**booking, "status": "COMPLETED"})

    async def admin_list_bookings(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        if status and status not in BOOKING_STATUSES:
            raise HTTPException(status_code=400, detail=f"Unknown booking status: {status}")

        payload = await self.marketplace.get(
            "/api/admin/bookings", params={"status": status, "page": page, "limit": limit}
        )
        bookings = items_of(payload, "bookings")
        if search and search.strip():
            bookings = [b for b in bookings if matches_search(b, search.strip())]

        payload = payload if isinstance(payload, dict) else {}
        return {
            "bookings": [decorate(b) for b in bookings],
            "pagination": payload.get("pagination"),
            "statusCounts": payload.get("statusCounts") or {},
        }

    async def delete_booking(self, booking_id: str) -> None:
        try:
            await self.marketplace.delete(f"/api/bookings/{booking_id}")
        except MarketplaceError as e:
            if e.status_code == 404:
                raise HTTPException(status_code=404, detail="Booking not found") from e
            raise
        logger.info(f"🗑️ Booking {booking_id} deleted by admin")
