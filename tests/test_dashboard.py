from datetime import datetime, timezone

import pytest

from conftest import CLIENT_HEADERS, VENDOR_HEADERS
from eva.domain.dashboard.service import build_calendar, build_payments, greeting_for

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)

BOOKINGS = [
    {"id": "b1", "status": "COMPLETED", "totalAmount": 1000, "eventDate": "2025-06-02T14:00:00.000Z",
     "eventType": "Wedding", "clientName": "Ada"},
    {"id": "b2", "status": "CONFIRMED", "quote": {"totalPrice": 500, "inquiry": {"fromName": "Kofi"}},
     "eventDate": "2025-07-20T10:00:00.000Z", "eventType": "Birthday"},
    {"id": "b3", "status": "CANCELLED", "totalAmount": 0, "eventDate": "2025-06-10T10:00:00.000Z"},
    {"id": "b4", "status": "DEPOSIT_PAID", "totalAmount": "250", "eventDate": "2025-06-28T18:30:00.000Z",
     "eventType": "Naming ceremony", "clientName": "Zainab"},
]


# ═══════════════════════════════════════════════════════
# PAYMENTS
# ═══════════════════════════════════════════════════════


def test_payment_stats():
    stats = build_payments(BOOKINGS, now=NOW, fee_rate=0.05)["stats"]

    assert stats["totalEarned"] == 1000
    assert stats["availableBalance"] == 950
    assert stats["pendingAmount"] == 750
    assert stats["pendingCount"] == 2
    # June events only: b1 and b4
    assert stats["thisMonth"] == 1250


def test_completed_bookings_carry_a_fee_line():
    transactions = build_payments(BOOKINGS, now=NOW, fee_rate=0.05)["transactions"]

    fee = next(t for t in transactions if t["type"] == "fee")
    assert fee["id"] == "b1-fee"
    assert fee["amount"] == -50
    assert fee["description"] == "Platform Fee"
    # Zero-amount bookings are skipped
    assert all(not t["id"].startswith("b3") for t in transactions)


def test_transactions_newest_first():
    transactions = build_payments(BOOKINGS, now=NOW)["transactions"]
    dates = [t["isoDate"] for t in transactions]

    assert dates == sorted(dates, reverse=True)
    assert transactions[0]["id"] == "b2"
    assert transactions[0]["clientName"] == "Kofi"


def test_payment_search_matches_description_and_client():
    result = build_payments(BOOKINGS, now=NOW, search="zain")
    assert [t["id"] for t in result["transactions"]] == ["b4"]

    result = build_payments(BOOKINGS, now=NOW, search="wedding")
    assert [t["id"] for t in result["transactions"]] == ["b1"]


# ═══════════════════════════════════════════════════════
# CALENDAR
# ═══════════════════════════════════════════════════════


def test_calendar_month_grid():
    cal = build_calendar(BOOKINGS, 2025, 6)

    assert cal["daysInMonth"] == 30
    # 1 June 2025 is a Sunday
    assert cal["firstDayOfMonth"] == 0
    assert [e["id"] for e in cal["events"]] == ["b1", "b3", "b4"]


def test_calendar_event_fields():
    cal = build_calendar(BOOKINGS, 2025, 6)
    event = cal["eventsByDate"]["2025-06-28"][0]

    assert event["time"] == "6:30 PM"
    assert event["color"] == "accent"
    assert event["location"] == "TBD"
    assert event["client"] == "Zainab"
    assert cal["eventsByDate"]["2025-06-10"][0]["color"] == "red"


def test_calendar_rejects_bad_month():
    with pytest.raises(ValueError):
        build_calendar(BOOKINGS, 2025, 13)


def test_greeting_by_hour():
    assert greeting_for(8) == "Good morning"
    assert greeting_for(13) == "Good afternoon"
    assert greeting_for(20) == "Good evening"


# ═══════════════════════════════════════════════════════
# API
# ═══════════════════════════════════════════════════════


@pytest.mark.anyio
async def test_client_dashboard_tolerates_failing_sources(client, marketplace):
    """A failing upstream source becomes an empty stat instead of an error"""
    marketplace.on(
        "GET",
        "/api/bookings",
        json={"bookings": [{"id": "b1"}], "pagination": {"total": 3}},
    )
    marketplace.on("GET", "/api/favorites", json={"favorites": [{"id": "f1"}, {"id": "f2"}]})
    marketplace.on("GET", "/api/quotes", status_code=500, json={"message": "down"})

    response = await client.get("/dashboard", headers=CLIENT_HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["firstName"] == "Ada"
    assert data["stats"]["upcomingBookings"] == 3
    assert data["stats"]["favoriteVendors"] == 2
    assert data["stats"]["pendingQuotes"] == 0
    assert data["recentBookings"] == [{"id": "b1"}]


@pytest.mark.anyio
async def test_vendor_dashboard_uses_provider_profile(client, marketplace):
    marketplace.on(
        "GET",
        "/api/vendor/profile",
        json={"provider": {"id": "prov-1", "businessName": "Lagos Lens", "categories": ["photographers"]}},
    )
    marketplace.on("GET", "/api/vendor/analytics", json={"revenue": {"period": 2500}})
    marketplace.on(
        "GET",
        "/api/inquiries",
        json={"inquiries": [{"id": "i1", "fromName": "kofi mensah"}], "pagination": {"total": 1}},
    )

    response = await client.get("/vendor/dashboard", headers=VENDOR_HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["providerName"] == "Lagos Lens"
    assert data["providerType"] == "photographers"
    assert data["stats"]["newInquiries"] == 1
    assert data["recentInquiries"][0]["initials"] == "KM"


@pytest.mark.anyio
async def test_vendor_calendar_rejects_month_out_of_range(client):
    response = await client.get("/vendor/calendar", params={"year": 2025, "month": 13}, headers=VENDOR_HEADERS)
    assert response.status_code == 422


@pytest.mark.anyio
async def test_analytics_period_is_validated(client):
    response = await client.get("/vendor/analytics", params={"period": "2w"}, headers=VENDOR_HEADERS)
    assert response.status_code == 400


@pytest.mark.anyio
async def test_admin_analytics_forbidden_for_vendors(client):
    response = await client.get("/admin/analytics", headers=VENDOR_HEADERS)
    assert response.status_code == 403
