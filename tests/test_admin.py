import csv
from datetime import datetime
from io import StringIO

import pytest

from conftest import ADMIN_HEADERS, VENDOR_HEADERS, body_of, fake
from eva.domain.admin.service import (
    REVIEW_ACTIONS,
    audit_logs_csv,
    dated_filename,
    parse_import_csv,
    present_user,
)

# ═══════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════


def test_marketplace_roles_are_presented_with_portal_names():
    assert present_user({"id": "u1", "role": "ADMINISTRATOR"})["role"] == "ADMIN"
    assert present_user({"id": "u2", "role": "PROFESSIONAL"})["role"] == "VENDOR"
    assert present_user({"id": "u3", "role": "CLIENT"})["role"] == "USER"
    assert present_user({"id": "u4"})["role"] == "USER"


def test_audit_csv_rows():
    text = audit_logs_csv(
        [
            {
                "createdAt": "2025-06-01T10:00:00Z",
                "action": "PROVIDER_APPROVED",
                "entityType": "Provider",
                "entityId": "p1",
                "user": {"email": "admin@example.com"},
                "ipAddress": "10.0.0.1",
            },
            {"createdAt": "2025-06-02T10:00:00Z", "action": "CRON_RUN", "entityType": "System"},
        ]
    )
    rows = list(csv.reader(StringIO(text)))

    assert rows[0] == ["Timestamp", "Action", "Entity Type", "Entity ID", "User", "IP Address"]
    assert rows[1][4] == "admin@example.com"
    assert rows[2][4] == "System"
    assert rows[2][3] == ""


def test_parse_import_csv_keys_rows_by_header():
    content = "\ufeffbusinessName, city\nLagos Lens , London\n,\nAccra Cakes,Leeds\n".encode()

    assert parse_import_csv(content) == [
        {"businessName": "Lagos Lens", "city": "London"},
        {"businessName": "Accra Cakes", "city": "Leeds"},
    ]


def test_parse_import_csv_errors():
    with pytest.raises(ValueError, match="no data rows"):
        parse_import_csv(b"businessName,city\n")
    with pytest.raises(ValueError, match="UTF-8"):
        parse_import_csv("name\nCafé".encode("latin-1"))


def test_dated_filename():
    assert dated_filename("audit-logs", "csv", datetime(2025, 3, 9)) == "audit-logs-2025-03-09.csv"


def test_review_status_maps_to_moderation_action():
    assert REVIEW_ACTIONS == {"APPROVED": "APPROVE", "REJECTED": "REJECT", "FLAGGED": "FLAG"}


# ═══════════════════════════════════════════════════════
# ACCESS
# ═══════════════════════════════════════════════════════


@pytest.mark.anyio
async def test_admin_area_forbidden_for_vendors(client):
    response = await client.get("/admin/users", headers=VENDOR_HEADERS)

    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have access to this area"


# ═══════════════════════════════════════════════════════
# USERS
# ═══════════════════════════════════════════════════════


@pytest.mark.anyio
async def test_user_role_filter_uses_marketplace_names(client, marketplace):
    marketplace.on("GET", "/api/admin/users", json={"users": [{"id": "u2", "role": "PROFESSIONAL"}]})

    response = await client.get("/admin/users", params={"role": "vendor"}, headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["users"][0]["role"] == "VENDOR"
    assert marketplace.last("GET", "/api/admin/users").url.params["role"] == "PROFESSIONAL"


@pytest.mark.anyio
async def test_unknown_role_filter(client):
    response = await client.get("/admin/users", params={"role": "SUPERUSER"}, headers=ADMIN_HEADERS)
    assert response.status_code == 400


@pytest.mark.anyio
async def test_update_user_role(client, marketplace):
    marketplace.on("PATCH", "/api/admin/users/u2", json={"user": {"id": "u2", "role": "ADMINISTRATOR"}})

    response = await client.patch("/admin/users/u2", headers=ADMIN_HEADERS, json={"role": "admin"})

    assert response.status_code == 200
    assert response.json()["role"] == "ADMIN"
    assert body_of(marketplace.last("PATCH", "/api/admin/users/u2")) == {"role": "ADMINISTRATOR"}


@pytest.mark.anyio
async def test_admin_cannot_demote_or_delete_self(client, marketplace):
    response = await client.patch("/admin/users/user-admin", headers=ADMIN_HEADERS, json={"role": "USER"})
    assert response.status_code == 400

    response = await client.delete("/admin/users/user-admin", headers=ADMIN_HEADERS)
    assert response.status_code == 400

    assert not marketplace.calls("PATCH", "/api/admin/users/user-admin")
    assert not marketplace.calls("DELETE", "/api/admin/users/user-admin")


@pytest.mark.anyio
async def test_empty_user_update(client):
    response = await client.patch("/admin/users/u2", headers=ADMIN_HEADERS, json={})
    assert response.status_code == 400


@pytest.mark.anyio
async def test_missing_user_is_404(client):
    response = await client.get("/admin/users/ghost", headers=ADMIN_HEADERS)
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


# ═══════════════════════════════════════════════════════
# VENDORS
# ═══════════════════════════════════════════════════════


@pytest.mark.anyio
async def test_vendor_list_filters(client, marketplace):
    marketplace.on(
        "GET",
        "/api/admin/providers",
        json={
            "success": True,
            "providers": [{"id": "p1", "status": "PENDING"}],
            "pagination": {"page": 1, "limit": 20, "total": 1, "totalPages": 1},
            "statusCounts": {"active": 9, "pending": 4, "suspended": 1},
        },
    )

    response = await client.get(
        "/admin/vendors", params={"status": "pending", "featured": "false"}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 200
    assert response.json()["statusCounts"] == {"active": 9, "pending": 4, "suspended": 1}
    sent = marketplace.last("GET", "/api/admin/providers").url.params
    assert sent["status"] == "PENDING"
    assert sent["featured"] == "false"


@pytest.mark.anyio
async def test_vendor_list_unknown_status(client):
    response = await client.get("/admin/vendors", params={"status": "banned"}, headers=ADMIN_HEADERS)
    assert response.status_code == 400


@pytest.mark.anyio
async def test_create_vendor(client, marketplace):
    marketplace.on("POST", "/api/providers", status_code=201, json={"provider": {"id": "p-new"}})

    response = await client.post(
        "/admin/vendors",
        headers=ADMIN_HEADERS,
        json={"ownerUserId": "u9", "businessName": "<i>Accra</i> Cakes", "categories": ["bakers"]},
    )

    assert response.status_code == 201
    assert response.json() == {"id": "p-new"}
    sent = body_of(marketplace.last("POST", "/api/providers"))
    assert sent["businessName"] == "&lt;i&gt;Accra&lt;/i&gt; Cakes"
    assert sent["ownerUserId"] == "u9"


@pytest.mark.anyio
async def test_create_vendor_warns_when_admin_becomes_owner(client, marketplace, caplog):
    marketplace.on(
        "POST", "/api/providers", status_code=201, json={"provider": {"id": "p-new", "ownerUserId": "user-admin"}}
    )

    response = await client.post(
        "/admin/vendors", headers=ADMIN_HEADERS, json={"ownerUserId": "u9", "businessName": "Accra Cakes"}
    )

    assert response.status_code == 201
    assert "owned by user-admin, not the requested user u9" in caplog.text


@pytest.mark.anyio
async def test_create_vendor_when_admin_already_owns_one(client, marketplace):
    marketplace.on(
        "POST", "/api/providers", status_code=400, json={"message": "User already has a provider profile"}
    )

    response = await client.post(
        "/admin/vendors", headers=ADMIN_HEADERS, json={"ownerUserId": "u9", "businessName": "Accra Cakes"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "User already has a provider profile"


@pytest.mark.anyio
async def test_moderate_vendor_default_message(client, marketplace):
    marketplace.on("POST", "/api/admin/providers/p1/moderate", json={"provider": {"id": "p1", "status": "SUSPENDED"}})

    response = await client.post(
        "/admin/vendors/p1/moderate", headers=ADMIN_HEADERS, json={"action": "SUSPEND", "reason": "Complaints"}
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Provider suspended successfully"
    assert response.json()["provider"]["status"] == "SUSPENDED"


@pytest.mark.anyio
async def test_verify_vendor_rejects_unknown_plan(client):
    response = await client.patch(
        "/admin/vendors/p1/verify", headers=ADMIN_HEADERS, json={"isVerified": True, "planTier": "GOLD"}
    )
    assert response.status_code == 422


# ═══════════════════════════════════════════════════════
# REFERENCE DATA
# ═══════════════════════════════════════════════════════


@pytest.mark.anyio
async def test_category_slug_is_derived_from_raw_name(client, marketplace):
    marketplace.on("POST", "/api/categories", status_code=201, json={"category": {"id": "c1", "slug": "music-djs"}})

    response = await client.post("/admin/categories", headers=ADMIN_HEADERS, json={"name": "Music & DJs"})

    assert response.status_code == 201
    sent = body_of(marketplace.last("POST", "/api/categories"))
    assert sent["slug"] == "music-djs"
    assert sent["name"] == "Music &amp; DJs"


@pytest.mark.anyio
async def test_name_without_slug_characters(client, marketplace):
    response = await client.post("/admin/tags", headers=ADMIN_HEADERS, json={"name": "!!!"})

    assert response.status_code == 400
    assert not marketplace.calls("POST", "/api/admin/tags")


@pytest.mark.anyio
async def test_explicit_slug_is_validated(client):
    response = await client.post("/admin/cities", headers=ADMIN_HEADERS, json={"name": "Leeds", "slug": "Leeds City"})
    assert response.status_code == 422


@pytest.mark.anyio
async def test_city_search_filters_by_name(client, marketplace):
    marketplace.on(
        "GET",
        "/api/cities",
        json={"cities": [{"name": "Manchester"}, {"name": "Leeds"}, {"name": "Leicester"}]},
    )

    response = await client.get("/admin/cities", params={"search": "le"}, headers=ADMIN_HEADERS)

    assert [c["name"] for c in response.json()["cities"]] == ["Leeds", "Leicester"]


@pytest.mark.anyio
async def test_tags_are_listed_from_admin_endpoint(client, marketplace):
    marketplace.on("GET", "/api/admin/tags", json={"tags": [{"slug": "nigerian", "isActive": False}]})

    response = await client.get("/admin/tags", headers=ADMIN_HEADERS)

    assert response.json() == {"tags": [{"slug": "nigerian", "isActive": False}]}


@pytest.mark.anyio
async def test_delete_missing_category(client):
    response = await client.delete("/admin/categories/none", headers=ADMIN_HEADERS)

    assert response.status_code == 404
    assert response.json()["detail"] == "Category not found"


# ═══════════════════════════════════════════════════════
# MODERATION
# ═══════════════════════════════════════════════════════


@pytest.mark.anyio
async def test_review_moderation_sends_action(client, marketplace):
    marketplace.on(
        "POST", "/api/reviews/r1/moderate", json={"review": {"id": "r1", "status": "FLAGGED"}}, optional=("reason",)
    )

    response = await client.post("/admin/reviews/r1/moderate", headers=ADMIN_HEADERS, json={"status": "flagged"})

    assert response.status_code == 200
    assert body_of(marketplace.last("POST", "/api/reviews/r1/moderate")) == {"action": "FLAG"}


@pytest.mark.anyio
async def test_review_listing_lowercases_status(client, marketplace):
    marketplace.on(
        "GET",
        "/api/admin/reviews",
        json={
            "reviews": [],
            "pagination": {"page": 1, "limit": 20, "total": 0, "pages": 0},
            "statusCounts": {"approved": 12, "pending": 2, "flagged": 1},
        },
    )

    response = await client.get("/admin/reviews", params={"status": "PENDING"}, headers=ADMIN_HEADERS)

    assert response.json()["statusCounts"] == {"approved": 12, "pending": 2, "flagged": 1}
    assert marketplace.last("GET", "/api/admin/reviews").url.params["status"] == "pending"


# ═══════════════════════════════════════════════════════
# AUDIT LOGS
# ═══════════════════════════════════════════════════════


@pytest.mark.anyio
async def test_audit_log_date_range_is_checked(client, marketplace):
    response = await client.get(
        "/admin/audit-logs",
        params={"startDate": "2025-06-10T00:00:00", "endDate": "2025-06-01T00:00:00"},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 400
    assert not marketplace.calls("GET", "/api/admin/audit-logs")


@pytest.mark.anyio
async def test_audit_log_export_is_csv_download(client, marketplace):
    marketplace.on(
        "GET",
        "/api/admin/audit-logs",
        json={"logs": [{"createdAt": "2025-06-01T10:00:00Z", "action": "LOGIN", "user": {"email": fake.email()}}]},
    )

    response = await client.get("/admin/audit-logs/export", params={"action": "LOGIN"}, headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"].startswith("attachment; filename=audit-logs-")
    assert response.headers["cache-control"] == "no-cache"
    assert response.text.splitlines()[0] == "Timestamp,Action,Entity Type,Entity ID,User,IP Address"

    sent = marketplace.last("GET", "/api/admin/audit-logs").url.params
    assert sent["limit"] == "1000"
    assert sent["action"] == "LOGIN"


# ═══════════════════════════════════════════════════════
# DATA TOOLS
# ═══════════════════════════════════════════════════════


@pytest.mark.anyio
async def test_data_export_download(client, marketplace):
    marketplace.on("POST", "/api/admin/export", content=b"id,email\n1,a@example.com\n")

    response = await client.post("/admin/data/export", headers=ADMIN_HEADERS, json={"type": "users", "format": "CSV"})

    assert response.status_code == 200
    assert response.content == b"id,email\n1,a@example.com\n"
    assert response.headers["content-type"].startswith("text/csv")
    today = datetime.now().strftime("%Y-%m-%d")
    assert response.headers["content-disposition"] == f"attachment; filename=users-export-{today}.csv"


@pytest.mark.anyio
async def test_data_export_unknown_type(client):
    response = await client.post("/admin/data/export", headers=ADMIN_HEADERS, json={"type": "payments"})
    assert response.status_code == 422


@pytest.mark.anyio
async def test_csv_import_upload(client, marketplace):
    marketplace.on("POST", "/api/admin/import", json={"jobId": "imp-1", "status": "PENDING"})

    response = await client.post(
        "/admin/data/import/csv",
        headers=ADMIN_HEADERS,
        data={"type": "cities", "isDryRun": "true"},
        files={"file": ("cities.csv", b"name,slug\nYork,york\n", "text/csv")},
    )

    assert response.status_code == 200
    assert response.json()["jobId"] == "imp-1"
    assert body_of(marketplace.last("POST", "/api/admin/import")) == {
        "type": "cities",
        "data": [{"name": "York", "slug": "york"}],
        "isDryRun": True,
    }


@pytest.mark.anyio
async def test_csv_import_without_rows(client, marketplace):
    response = await client.post(
        "/admin/data/import/csv",
        headers=ADMIN_HEADERS,
        data={"type": "cities"},
        files={"file": ("cities.csv", b"name,slug\n", "text/csv")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "CSV file has no data rows"


@pytest.mark.anyio
async def test_json_import_needs_rows(client):
    response = await client.post(
        "/admin/data/import", headers=ADMIN_HEADERS, json={"type": "providers", "data": []}
    )
    assert response.status_code == 422


@pytest.mark.anyio
async def test_slug_normalization_is_queued(client, monkeypatch):
    async def fake_enqueue(function, *args):
        assert function == "normalize_category_slugs_task"
        return "job-42"

    monkeypatch.setattr("eva.domain.admin.router.enqueue_job", fake_enqueue)

    response = await client.post("/admin/maintenance/normalize-category-slugs", headers=ADMIN_HEADERS)

    assert response.status_code == 202
    assert response.json() == {"jobId": "job-42", "status": "queued"}


@pytest.mark.anyio
async def test_audit_log_list_keeps_filter_counts(client, marketplace):
    filters = {"actions": [{"action": "LOGIN", "count": 3}], "entityTypes": [{"type": "Provider", "count": 1}]}
    marketplace.on(
        "GET",
        "/api/admin/audit-logs",
        json={"logs": [], "pagination": {"page": 1, "limit": 50, "total": 0, "pages": 0}, "filters": filters},
    )

    response = await client.get("/admin/audit-logs", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["filters"] == filters
