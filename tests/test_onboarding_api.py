import httpx
import pytest

from conftest import VENDOR_HEADERS, body_of, fake

pytestmark = pytest.mark.anyio

COVER = "https://cdn.example.com/cover.jpg"


def listing_payload(**overrides) -> dict:
    data = {
        "headline": "Wedding photography",
        "longDescription": "Full day coverage with an edited gallery",
        "price": 1200,
        "timeEstimate": "8 hours",
        "coverImageUrl": COVER,
    }
    data.update(overrides)
    return data


async def fill_wizard(client):
    response = await client.patch(
        "/vendor/onboarding/data",
        headers=VENDOR_HEADERS,
        json={
            "businessName": fake.company(),
            "description": "Documentary wedding photography",
            "city": "London",
            "postcode": "E1 6AN",
            "categories": ["photographers"],
            "coverImage": COVER,
        },
    )
    assert response.status_code == 200
    response = await client.post("/vendor/onboarding/listings", headers=VENDOR_HEADERS, json=listing_payload())
    assert response.status_code == 200
    response = await client.post("/vendor/onboarding/team", headers=VENDOR_HEADERS, json={"name": "Kemi"})
    assert response.status_code == 200


# ═══════════════════════════════════════════════════════
# STATE
# ═══════════════════════════════════════════════════════


async def test_state_requires_authentication(client):
    response = await client.get("/vendor/onboarding")
    assert response.status_code == 401


async def test_state_includes_reference_data(client, marketplace):
    """Fresh wizard with cities and category options from the marketplace"""
    marketplace.on("GET", "/api/cities", json={"cities": [{"id": "c1", "name": "London", "slug": "london"}]})
    marketplace.on(
        "GET",
        "/api/categories",
        json={"categories": [{"id": "cat-1", "name": "Venues", "slug": "venues"}]},
    )

    response = await client.get("/vendor/onboarding", headers=VENDOR_HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["currentStep"] == "basics"
    assert data["alreadyOnboarded"] is False
    assert data["availableCities"][0]["slug"] == "london"
    assert data["categoryOptions"] == [{"id": "venues", "name": "Venues"}]
    assert len(data["steps"]) == 9


async def test_state_falls_back_to_default_categories(client, marketplace):
    marketplace.on("GET", "/api/cities", json={"cities": []})
    marketplace.on("GET", "/api/categories", status_code=500, json={"message": "boom"})

    response = await client.get("/vendor/onboarding", headers=VENDOR_HEADERS)

    assert response.status_code == 200
    options = response.json()["categoryOptions"]
    assert len(options) == 9
    assert options[-1] == {"id": "makeup", "name": "Makeup"}


async def test_state_redirects_when_already_onboarded(client, marketplace):
    marketplace.on("GET", "/api/vendor/profile", json={"provider": {"id": "prov-1"}})

    response = await client.get("/vendor/onboarding", headers=VENDOR_HEADERS)

    assert response.status_code == 200
    assert response.json()["alreadyOnboarded"] is True
    assert response.json()["redirectTo"] == "/vendor"


# ═══════════════════════════════════════════════════════
# NAVIGATION AND FORM
# ═══════════════════════════════════════════════════════


async def test_next_rejected_while_step_incomplete(client):
    response = await client.post("/vendor/onboarding/next", headers=VENDOR_HEADERS)

    assert response.status_code == 400
    assert response.json()["detail"] == "Please complete 'Business Basics' before continuing"


async def test_progress_is_persisted_between_requests(client, marketplace):
    marketplace.on("GET", "/api/cities", json={"cities": []})
    await client.patch(
        "/vendor/onboarding/data",
        headers=VENDOR_HEADERS,
        json={"businessName": "Lagos Lens", "description": "Photography"},
    )

    response = await client.post("/vendor/onboarding/next", headers=VENDOR_HEADERS)
    assert response.status_code == 200
    assert response.json()["currentStep"] == "location"

    response = await client.get("/vendor/onboarding", headers=VENDOR_HEADERS)
    assert response.json()["currentStep"] == "location"
    assert response.json()["formData"]["businessName"] == "Lagos Lens"


async def test_invalid_website_is_rejected(client):
    response = await client.patch(
        "/vendor/onboarding/data", headers=VENDOR_HEADERS, json={"website": "not a url"}
    )
    assert response.status_code == 422


async def test_null_business_name_is_400(client):
    await client.patch("/vendor/onboarding/data", headers=VENDOR_HEADERS, json={"businessName": "Lagos Lens"})

    response = await client.patch(
        "/vendor/onboarding/data", headers=VENDOR_HEADERS, json={"businessName": None}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid value for businessName"
    response = await client.get("/vendor/onboarding", headers=VENDOR_HEADERS)
    assert response.json()["formData"]["businessName"] == "Lagos Lens"


async def test_toggle_and_schedule_change(client):
    response = await client.post(
        "/vendor/onboarding/toggle", headers=VENDOR_HEADERS, json={"field": "categories", "item": "bakers"}
    )
    assert response.json()["formData"]["categories"] == ["bakers"]

    response = await client.patch(
        "/vendor/onboarding/schedule/6", headers=VENDOR_HEADERS, json={"field": "isClosed", "value": False}
    )
    assert response.status_code == 200
    assert response.json()["formData"]["weeklySchedule"][6]["isClosed"] is False

    response = await client.patch(
        "/vendor/onboarding/schedule/2", headers=VENDOR_HEADERS, json={"field": "startTime", "value": "9am"}
    )
    assert response.status_code == 400


async def test_incomplete_listing_returns_400(client):
    response = await client.post(
        "/vendor/onboarding/listings", headers=VENDOR_HEADERS, json=listing_payload(price=0)
    )
    assert response.status_code == 400


async def test_jump_to_unknown_step_is_422(client):
    response = await client.post("/vendor/onboarding/jump", headers=VENDOR_HEADERS, json={"step": "billing"})
    assert response.status_code == 422


async def test_reset_discards_the_draft(client):
    await client.post("/vendor/onboarding/jump", headers=VENDOR_HEADERS, json={"step": "media"})

    response = await client.delete("/vendor/onboarding", headers=VENDOR_HEADERS)

    assert response.status_code == 200
    assert response.json()["currentStep"] == "basics"


# ═══════════════════════════════════════════════════════
# PUBLISH
# ═══════════════════════════════════════════════════════


async def test_publish_reports_first_incomplete_step(client, marketplace):
    response = await client.post("/vendor/onboarding/publish", headers=VENDOR_HEADERS)

    assert response.status_code == 400
    assert response.json()["detail"]["step"] == "basics"
    assert not marketplace.calls("POST", "/api/vendor/profile")


async def test_publish_creates_profile_schedule_team_and_listings(client, marketplace):
    marketplace.on("POST", "/api/vendor/profile", status_code=201, json={"provider": {"id": "prov-9"}})
    marketplace.on("POST", "/api/vendor/schedule", status_code=201, json={"schedules": []})
    marketplace.on("POST", "/api/vendor/team", status_code=201, json={"teamMembers": []})
    marketplace.on("POST", "/api/vendor/listings", status_code=201, json={"listing": {"id": "l-1"}})
    await fill_wizard(client)

    response = await client.post("/vendor/onboarding/publish", headers=VENDOR_HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["providerId"] == "prov-9"
    assert data["redirectTo"] == "/vendor?welcome=true"
    assert data["progress"] == [
        "Creating your business profile...",
        "Setting up your schedule...",
        "Adding your team...",
        "Publishing your services...",
    ]

    writes = [r.url.path for r in marketplace.requests if r.method == "POST"]
    assert writes == ["/api/vendor/profile", "/api/vendor/schedule", "/api/vendor/team", "/api/vendor/listings"]

    profile = body_of(marketplace.last("POST", "/api/vendor/profile"))
    assert profile["isPublished"] is True
    schedule = body_of(marketplace.last("POST", "/api/vendor/schedule"))
    assert schedule["providerId"] == "prov-9"
    assert len(schedule["schedules"]) == 7
    listing = body_of(marketplace.last("POST", "/api/vendor/listings"))
    assert listing["providerId"] == "prov-9"

    # Draft is gone after a successful publish
    response = await client.post("/vendor/onboarding/next", headers=VENDOR_HEADERS)
    assert response.status_code == 400


async def test_failed_listing_keeps_the_draft(client, marketplace):
    marketplace.on("POST", "/api/vendor/profile", status_code=201, json={"provider": {"id": "prov-9"}})
    marketplace.on("POST", "/api/vendor/schedule", json={})
    marketplace.on("POST", "/api/vendor/team", json={})
    marketplace.on("POST", "/api/vendor/listings", status_code=500, json={"message": "database down"})
    await fill_wizard(client)

    response = await client.post("/vendor/onboarding/publish", headers=VENDOR_HEADERS)

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["message"] == "Failed to save one or more listings"
    assert detail["progress"][-1] == "Publishing your services..."

    # Still publishable: the wizard data survived
    response = await client.post("/vendor/onboarding/jump", headers=VENDOR_HEADERS, json={"step": "review"})
    assert response.json()["formData"]["listings"][0]["headline"] == "Wedding photography"


async def test_profile_rejection_keeps_upstream_status(client, marketplace):
    marketplace.on("POST", "/api/vendor/profile", status_code=409, json={"message": "Provider already exists"})
    await fill_wizard(client)

    response = await client.post("/vendor/onboarding/publish", headers=VENDOR_HEADERS)

    assert response.status_code == 409
    assert response.json()["detail"]["message"] == "Provider already exists"
    assert response.json()["detail"]["progress"] == ["Creating your business profile..."]


async def test_save_draft_creates_unpublished_profile(client, marketplace):
    marketplace.on("POST", "/api/vendor/profile", status_code=201, json={"provider": {"id": "prov-3"}})
    await client.patch("/vendor/onboarding/data", headers=VENDOR_HEADERS, json={"businessName": "Half done"})

    response = await client.post("/vendor/onboarding/save-draft", headers=VENDOR_HEADERS)

    assert response.status_code == 200
    assert response.json()["redirectTo"] == "/vendor"
    assert body_of(marketplace.last("POST", "/api/vendor/profile"))["isPublished"] is False


async def test_marketplace_outage_is_503(client, marketplace):
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    marketplace.on("POST", "/api/vendor/profile", handler=unreachable)

    response = await client.post("/vendor/onboarding/save-draft", headers=VENDOR_HEADERS)

    assert response.status_code == 503
    assert response.json()["detail"] == "Marketplace API unavailable"
