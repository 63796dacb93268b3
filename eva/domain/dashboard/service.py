"""Dashboard service - Aggregates marketplace data into portal dashboard view models"""

import asyncio
import calendar
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import HTTPException

from ...cache import build_analytics_key, cache
from ...config import ANALYTICS_CACHE_TTL, PLATFORM_FEE_RATE
from ...constants import ANALYTICS_PERIODS
from ...formatters import (
    format_currency,
    format_short_date,
    format_time,
    format_time_ago_short,
    get_initials,
    parse_datetime,
)
from ...schemas import SessionUser
from ...services.marketplace_client import MarketplaceClient, item_of, items_of, total_of

logger = logging.getLogger(__name__)

PENDING_PAYOUT_STATUSES = ["PENDING", "CONFIRMED", "DEPOSIT_PAID"]

CALENDAR_COLORS = {
    "CONFIRMED": "green",
    "PENDING": "yellow",
    "COMPLETED": "blue",
    "CANCELLED": "red",
}


def greeting_for(hour: int) -> str:
    if hour < 12:
        return "Good morning"
    if hour < 17:
        return "Good afternoon"
    return "Good evening"


def booking_amount(booking: dict) -> float:
    quote = booking.get("quote") or {}
    try:
        return float(booking.get("totalAmount") or quote.get("totalPrice") or 0)
    except (TypeError, ValueError):
        return 0.0


def booking_client_name(booking: dict) -> Optional[str]:
    inquiry = (booking.get("quote") or {}).get("inquiry") or {}
    return inquiry.get("fromName") or booking.get("clientName")


def build_payments(
    bookings: list[dict],
    now: Optional[datetime] = None,
    fee_rate: float = PLATFORM_FEE_RATE,
    search: Optional[str] = None,
) -> dict:
    """
    Turn vendor bookings into payout transactions and summary figures

    Completed bookings are earned and carry a platform fee line; PENDING,
    CONFIRMED and DEPOSIT_PAID bookings are still pending payout.
    """
    now = now or datetime.now(timezone.utc)
    transactions: list[dict] = []
    total_earned = 0.0
    pending_amount = 0.0
    pending_count = 0
    this_month = 0.0

    for booking in bookings:
        amount = booking_amount(booking)
        if amount <= 0:
            continue

        event_date = parse_datetime(booking.get("eventDate"))
        iso_date = event_date.isoformat() if event_date else ""
        is_completed = booking.get("status") == "COMPLETED"

        transactions.append(
            {
                "id": booking.get("id"),
                "description": booking.get("eventType") or "Booking",
                "date": format_short_date(event_date) if event_date else "",
                "isoDate": iso_date,
                "type": "income",
                "status": "completed" if is_completed else "pending",
                "amount": amount,
                "clientName": booking_client_name(booking),
            }
        )

        if is_completed:
            total_earned += amount
            transactions.append(
                {
                    "id": f"{booking.get('id')}-fee",
                    "description": "Platform Fee",
                    "date": format_short_date(event_date) if event_date else "",
                    "isoDate": iso_date,
                    "type": "fee",
                    "status": "completed",
                    "amount": -round(amount * fee_rate, 2),
                    "clientName": None,
                }
            )

        if booking.get("status") in PENDING_PAYOUT_STATUSES:
            pending_amount += amount
            pending_count += 1

        if event_date and (event_date.year, event_date.month) == (now.year, now.month):
            this_month += amount

    transactions.sort(key=lambda t: t["isoDate"], reverse=True)

    if search and search.strip():
        query = search.strip().lower()
        transactions = [
            t
            for t in transactions
            if query in t["description"].lower() or query in (t["clientName"] or "").lower()
        ]

    return {
        "stats": {
            "availableBalance": round(total_earned * (1 - fee_rate), 2),
            "pendingAmount": pending_amount,
            "thisMonth": this_month,
            "totalEarned": total_earned,
            "pendingCount": pending_count,
        },
        "transactions": transactions,
    }


def build_calendar(bookings: list[dict], year: int, month: int) -> dict:
    """Sunday-first month grid with bookings as events"""
    if not 1 <= month <= 12:
        raise ValueError("Month must be between 1 and 12")

    days_in_month = calendar.monthrange(year, month)[1]
    # calendar.weekday: Monday=0; shift so Sunday=0
    first_weekday = (calendar.weekday(year, month, 1) + 1) % 7

    events = []
    for booking in bookings:
        event_date = parse_datetime(booking.get("eventDate"))
        if event_date is None or (event_date.year, event_date.month) != (year, month):
            continue
        status = booking.get("status", "")
        events.append(
            {
                "id": booking.get("id"),
                "title": booking.get("eventType") or "Event",
                "client": booking_client_name(booking) or "Client",
                "date": event_date.date().isoformat(),
                "time": format_time(event_date),
                "location": booking.get("eventLocation") or "TBD",
                "type": booking.get("eventType") or "event",
                "color": CALENDAR_COLORS.get(status, "accent"),
                "status": status,
            }
        )

    by_date: dict[str, list[dict]] = {}
    for event in events:
        by_date.setdefault(event["date"], []).append(event)

    return {
        "year": year,
        "month": month,
        "daysInMonth": days_in_month,
        "firstDayOfMonth": first_weekday,
        "events": events,
        "eventsByDate": by_date,
    }


def validate_period(period: str) -> str:
    if period not in ANALYTICS_PERIODS:
        raise HTTPException(
            status_code=400,
            detail=f"Period must be one of: {', '.join(ANALYTICS_PERIODS)}",
        )
    return period


class DashboardService:
    """Service layer for client, vendor and admin dashboards"""

    def __init__(self, marketplace: MarketplaceClient, user: SessionUser):
        self.marketplace = marketplace
        self.user = user

    async def _gather(self, **calls) -> dict[str, Any]:
        """Run upstream calls concurrently; a failing source becomes None"""
        names = list(calls)
        results = await asyncio.gather(*calls.values(), return_exceptions=True)
        out: dict[str, Any] = {}
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.error(f"❌ Dashboard source '{name}' failed for user {self.user.id}: {result}")
                out[name] = None
            else:
                out[name] = result
        return out

    async def client_dashboard(self, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now()
        data = await self._gather(
            bookings=self.marketplace.get("/api/bookings", params={"limit": 5, "upcoming": "true"}),
            inquiries=self.marketplace.get("/api/inquiries", params={"limit": 5}),
            favorites=self.marketplace.get("/api/favorites"),
            reviews=self.marketplace.get("/api/reviews", params={"limit": 1}),
            quotes=self.marketplace.get("/api/quotes", params={"status": "SENT", "limit": 1}),
        )

        return {
            "greeting": greeting_for(now.hour),
            "firstName": self.user.first_name,
            "stats": {
                "upcomingBookings": total_of(data["bookings"]),
                "pendingQuotes": total_of(data["quotes"]),
                "activeInquiries": total_of(data["inquiries"]),
                "totalReviews": total_of(data["reviews"]),
                "favoriteVendors": len(items_of(data["favorites"], "favorites")),
            },
            "recentBookings": items_of(data["bookings"], "bookings"),
            "recentInquiries": items_of(data["inquiries"], "inquiries"),
        }

    async def vendor_dashboard(self, now: Optional[datetime] = None) -> dict:
        data = await self._gather(
            inquiries=self.marketplace.get("/api/inquiries", params={"limit": 5}),
            bookings=self.marketplace.get("/api/bookings", params={"limit": 5, "upcoming": "true"}),
            quotes=self.marketplace.get("/api/quotes", params={"status": "SENT", "limit": 1}),
            profile=self.marketplace.get("/api/vendor/profile"),
            analytics=self.marketplace.get("/api/vendor/analytics", params={"period": "30d"}),
        )

        provider = item_of(data["profile"], "provider") if data["profile"] else {}
        categories = provider.get("categories") or []
        revenue = ((data["analytics"] or {}).get("revenue") or {}).get("period") or 0

        recent_inquiries = []
        for inquiry in items_of(data["inquiries"], "inquiries"):
            name = inquiry.get("fromName") or (inquiry.get("user") or {}).get("name") or "Client"
            recent_inquiries.append(
                {
                    **inquiry,
                    "initials": get_initials(name),
                    "timeAgo": format_time_ago_short(inquiry.get("createdAt"), now),
                }
            )

        return {
            "providerName": provider.get("businessName") or self.user.name or "",
            "providerType": categories[0] if categories else "Vendor",
            "stats": {
                "newInquiries": total_of(data["inquiries"]),
                "pendingQuotes": total_of(data["quotes"]),
                "upcomingBookings": total_of(data["bookings"]),
                "monthlyRevenue": format_currency(revenue),
            },
            "recentInquiries": recent_inquiries,
            "upcomingBookings": items_of(data["bookings"], "bookings"),
        }

    async def vendor_payments(self, search: Optional[str] = None) -> dict:
        payload = await self.marketplace.get("/api/bookings", params={"limit": 100})
        return build_payments(items_of(payload, "bookings"), search=search)

    async def vendor_calendar(self, year: int, month: int) -> dict:
        payload = await self.marketplace.get("/api/bookings", params={"limit": 100})
        try:
            return build_calendar(items_of(payload, "bookings"), year, month)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    async def _analytics(self, scope: str, path: str, period: str) -> dict:
        validate_period(period)
        owner = (self.user.providerId or self.user.id) if scope == "vendor" else "platform"
        cache_key = build_analytics_key(scope, owner, period)
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

        result = await self.marketplace.get(path, params={"period": period})
        cache.set(cache_key, result, ANALYTICS_CACHE_TTL)
        return result

    async def vendor_analytics(self, period: str = "30d") -> dict:
        return await self._analytics("vendor", "/api/vendor/analytics", period)

    async def admin_analytics(self, period: str = "30d") -> dict:
        return await self._analytics("admin", "/api/admin/analytics", period)
