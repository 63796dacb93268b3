import pytest

from conftest import CLIENT_HEADERS, VENDOR_HEADERS, body_of
from eva.domain.account.repository import PreferenceRepository
from eva.domain.onboarding.repository import OnboardingDraftRepository

pytestmark = pytest.mark.anyio


def week(start: int = 0, count: int = 7) -> list[dict]:
    return [
        {"dayOfWeek": day, "startTime": "09:00", "endTime": "17:00", "isClosed": day in (0, 6)}
        for day in reversed(range(start, start + count))
    ]


# ═══════════════════════════════════════════════════════
# PREFERENCES
# ═══════════════════════════════════════════════════════


async def test_preferences_default_without_a_row(client):
    response = await client.get("/account/preferences", headers=CLIENT_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"darkMode": False, "emailNotifications": True, "smsNotifications": False}


async def test_preferences_update_is_persisted(client, db):
    response = await client.patch("/account/preferences", headers=CLIENT_HEADERS, json={"darkMode": True})
    assert response.json() == {"darkMode": True, "emailNotifications": True, "smsNotifications": False}

    response = await client.patch(
        "/account/preferences", headers=CLIENT_HEADERS, json={"emailNotifications": False}
    )
    assert response.json() == {"darkMode": True, "emailNotifications": False, "smsNotifications": False}

    stored = PreferenceRepository.get(db, "user-client")
    assert stored.dark_mode is True
    assert stored.email_notifications is False


# ═══════════════════════════════════════════════════════
# PROFILE & PASSWORD
# ═══════════════════════════════════════════════════════


async def test_profile_name_is_sanitized(client, marketplace):
    marketplace.on("PATCH", "/api/users/me", json={"user": {"id": "user-client", "name": "Ada &amp; Co"}})

    response = await client.patch("/account/profile", headers=CLIENT_HEADERS, json={"name": " Ada & Co "})

    assert response.status_code == 200
    assert body_of(marketplace.last("PATCH", "/api/users/me")) == {"name": "Ada &amp; Co"}


async def test_empty_profile_update(client):
    response = await client.patch("/account/profile", headers=CLIENT_HEADERS, json={})
    assert response.status_code == 400


async def test_new_password_must_differ(client, marketplace):
    response = await client.post(
        "/account/password",
        headers=CLIENT_HEADERS,
        json={"currentPassword": "Sunshine42", "newPassword": "Sunshine42"},
    )

    assert response.status_code == 400
    assert not marketplace.calls("POST", "/api/users/me/password")


async def test_weak_new_password(client):
    response = await client.post(
        "/account/password", headers=CLIENT_HEADERS, json={"currentPassword": "Sunshine42", "newPassword": "short"}
    )
    assert response.status_code == 422


async def test_wrong_current_password(client, marketplace):
    marketplace.on(
        "POST", "/api/users/me/password", status_code=401, json={"message": "Current password is incorrect"}
    )

    response = await client.post(
        "/account/password",
        headers=CLIENT_HEADERS,
        json={"currentPassword": "Wrong1234", "newPassword": "Moonlight77"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Current password is incorrect"


async def test_password_changed(client, marketplace):
    marketplace.on("POST", "/api/users/me/password", json={"success": True})

    response = await client.post(
        "/account/password",
        headers=CLIENT_HEADERS,
        json={"currentPassword": "Sunshine42", "newPassword": "Moonlight77"},
    )

    assert response.json() == {"message": "Password changed successfully"}
    assert body_of(marketplace.last("POST", "/api/users/me/password")) == {
        "currentPassword": "Sunshine42",
        "newPassword": "Moonlight77",
    }


# ═══════════════════════════════════════════════════════
# ACCOUNT DELETION
# ═══════════════════════════════════════════════════════


async def test_delete_account_removes_local_data(client, marketplace, db):
    PreferenceRepository.upsert(db, "user-client", {"darkMode": True})
    OnboardingDraftRepository.save_draft(db, "user-client", "basics", {"businessName": "Ada Events"})
    marketplace.on("DELETE", "/api/auth/delete-account", json={"success": True})

    response = await client.request(
        "DELETE", "/account", headers=CLIENT_HEADERS, json={"password": "CONFIRM_DELETE"}
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Account deleted", "redirectTo": "/"}
    assert body_of(marketplace.last("DELETE", "/api/auth/delete-account")) == {"password": "CONFIRM_DELETE"}

    db.expire_all()
    assert PreferenceRepository.get(db, "user-client") is None
    assert OnboardingDraftRepository.get_draft(db, "user-client") is None


async def test_rejected_deletion_keeps_local_data(client, marketplace, db):
    PreferenceRepository.upsert(db, "user-client", {"darkMode": True})
    marketplace.on("DELETE", "/api/auth/delete-account", status_code=400, json={"message": "Incorrect password"})

    response = await client.request("DELETE", "/account", headers=CLIENT_HEADERS, json={"password": "nope"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Incorrect password"
    db.expire_all()
    assert PreferenceRepository.get(db, "user-client") is not None


# ═══════════════════════════════════════════════════════
# VENDOR BUSINESS DATA
# ═══════════════════════════════════════════════════════


async def test_schedule_needs_every_day(client):
    response = await client.put("/vendor/schedule", headers=VENDOR_HEADERS, json={"schedules": week(count=6)})
    assert response.status_code == 422


async def test_schedule_with_repeated_day(client):
    days = week(count=6) + [{"dayOfWeek": 3}]

    response = await client.put("/vendor/schedule", headers=VENDOR_HEADERS, json={"schedules": days})

    assert response.status_code == 422


async def test_schedule_is_replaced_in_day_order(client, marketplace):
    marketplace.on("POST", "/api/vendor/schedule", json={"schedules": week()})

    response = await client.put("/vendor/schedule", headers=VENDOR_HEADERS, json={"schedules": week()})

    assert response.status_code == 200
    sent = body_of(marketplace.last("POST", "/api/vendor/schedule"))
    assert sent["providerId"] == "prov-1"
    assert [d["dayOfWeek"] for d in sent["schedules"]] == [0, 1, 2, 3, 4, 5, 6]
    assert sent["schedules"][0]["isClosed"] is True


async def test_team_is_listed_for_the_callers_provider(client, marketplace):
    marketplace.on("GET", "/api/vendor/team", json={"teamMembers": [{"id": "t1", "name": "Tolu"}]})

    response = await client.get("/vendor/team", headers=VENDOR_HEADERS)

    assert response.json() == {"teamMembers": [{"id": "t1", "name": "Tolu"}]}
    assert marketplace.last("GET", "/api/vendor/team").url.params["providerId"] == "prov-1"


async def test_remove_team_member(client, marketplace):
    marketplace.on("DELETE", "/api/vendor/team", json={"success": True})

    response = await client.delete("/vendor/team/t1", headers=VENDOR_HEADERS)

    assert response.json() == {"message": "Team member removed"}
    assert marketplace.last("DELETE", "/api/vendor/team").url.params["id"] == "t1"


async def test_vendor_without_profile(client, marketplace):
    marketplace.on("GET", "/api/vendor/profile", json={"provider": None})

    response = await client.get("/vendor/profile", headers=VENDOR_HEADERS)

    assert response.status_code == 404
    assert response.json()["detail"] == "Vendor profile not found. Complete onboarding first."


async def test_blank_listing_headline(client):
    response = await client.post(
        "/vendor/listings",
        headers=VENDOR_HEADERS,
        json={"headline": "   ", "price": 250, "timeEstimate": "4 hours"},
    )
    assert response.status_code == 422


async def test_create_listing(client, marketplace):
    marketplace.on("POST", "/api/vendor/listings", status_code=201, json={"listing": {"id": "l1"}})

    response = await client.post(
        "/vendor/listings",
        headers=VENDOR_HEADERS,
        json={"headline": "Full day <coverage>", "price": 1200, "timeEstimate": " 8 hours "},
    )

    assert response.status_code == 201
    assert response.json() == {"id": "l1"}
    sent = body_of(marketplace.last("POST", "/api/vendor/listings"))
    assert sent["headline"] == "Full day &lt;coverage&gt;"
    assert sent["timeEstimate"] == "8 hours"
    assert sent["galleryUrls"] == []


async def test_missing_listing(client):
    response = await client.get("/vendor/listings/l404", headers=VENDOR_HEADERS)

    assert response.status_code == 404
    assert response.json()["detail"] == "Listing not found"


async def test_clients_cannot_manage_listings(client):
    response = await client.get("/vendor/listings", headers=CLIENT_HEADERS)
    assert response.status_code == 403
