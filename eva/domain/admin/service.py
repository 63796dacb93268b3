"""
Administration service - users, vendors, reference data, moderation and data tools
"""

import csv
import logging
from datetime import datetime
from io import StringIO
from typing import Optional

from fastapi import HTTPException

from ...auth import normalize_role
from ...cache import invalidate_reference_data
from ...constants import MARKETPLACE_ROLES, PROVIDER_STATUSES, REVIEW_STATUSES, USER_ROLES
from ...formatters import slugify
from ...schemas import SessionUser
from ...services.marketplace_client import (
    MarketplaceClient,
    MarketplaceError,
    item_of,
    items_of,
    raise_not_found,
    without_none,
)
from ...services.reference_data import get_categories, get_cities
from ...shared.validators import validate_slug
from ...utils.sanitization import sanitize_dict, sanitize_string
from .schemas import (
    AdminUserUpdate,
    AuditLogQuery,
    ExportRequest,
    ImportRequest,
    ReviewModerate,
    VendorCreate,
    VendorModerate,
    VendorUpdate,
    VendorVerify,
)

logger = logging.getLogger(__name__)

AUDIT_EXPORT_LIMIT = 1000
AUDIT_CSV_HEADER = ["Timestamp", "Action", "Entity Type", "Entity ID", "User", "IP Address"]

REVIEW_ACTIONS = {"APPROVED": "APPROVE", "REJECTED": "REJECT", "FLAGGED": "FLAG"}

MODERATION_RESULTS = {
    "APPROVE": "approved",
    "REJECT": "rejected",
    "SUSPEND": "suspended",
    "ACTIVATE": "activated",
    "FEATURE": "featured",
    "UNFEATURE": "unfeatured",
    "VERIFY": "verified",
    "UNVERIFY": "unverified",
}

VENDOR_TEXT_FIELDS = ["businessName", "description", "address", "city", "postcode", "instagram"]

# kind -> (collection path, item path template, response key)
REFERENCE_ENDPOINTS = {
    "categories": ("/api/categories", "/api/categories/{id}", "category"),
    "cities": ("/api/cities", "/api/cities/{id}", "city"),
    "tags": ("/api/admin/tags", "/api/admin/tags/{id}", "tag"),
}


def present_user(user: dict) -> dict:
    """Marketplace user record with the role translated to the portal's names"""
    return {**user, "role": normalize_role(user.get("role"))}


def audit_logs_csv(logs: list[dict]) -> str:
    """Render audit log rows as CSV text"""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(AUDIT_CSV_HEADER)
    for log in logs:
        user = log.get("user") or {}
        writer.writerow(
            [
                log.get("createdAt") or "",
                log.get("action") or "",
                log.get("entityType") or "",
                log.get("entityId") or "",
                user.get("email") or "System",
                log.get("ipAddress") or "",
            ]
        )
    return output.getvalue()


def parse_import_csv(content: bytes) -> list[dict]:
    """
    Parse an uploaded CSV file into row dicts keyed by the header row

    Raises:
        ValueError: when the file is not UTF-8 or holds no data rows
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValueError("File must be UTF-8 encoded CSV") from e

    rows = [
        {key.strip(): (value or "").strip() for key, value in row.items() if key}
        for row in csv.DictReader(StringIO(text))
    ]
    rows = [row for row in rows if any(row.values())]
    if not rows:
        raise ValueError("CSV file has no data rows")
    return rows


def dated_filename(prefix: str, extension: str, today: Optional[datetime] = None) -> str:
    return f"{prefix}-{(today or datetime.now()).strftime('%Y-%m-%d')}.{extension}"


class AdminService:
    def __init__(self, marketplace: MarketplaceClient, user: SessionUser):
        self.marketplace = marketplace
        self.user = user

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def list_users(
        self,
        search: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        if role:
            role = role.upper()
            if role not in USER_ROLES:
                raise HTTPException(status_code=400, detail=f"Unknown role: {role}")
        payload = await self.marketplace.get(
            "/api/admin/users",
            params={
                "search": search.strip() if search else None,
                "role": MARKETPLACE_ROLES[role] if role else None,
                "status": status.upper() if status else None,
                "page": page,
                "limit": limit,
            },
        )
        return {
            "users": [present_user(u) for u in items_of(payload, "users")],
            "pagination": payload.get("pagination") if isinstance(payload, dict) else None,
        }

    async def get_user(self, user_id: str) -> dict:
        try:
            payload = await self.marketplace.get(f"/api/admin/users/{user_id}")
        except MarketplaceError as e:
            raise_not_found(e, "User")
        return present_user(item_of(payload, "user"))

    async def update_user(self, user_id: str, data: AdminUserUpdate) -> dict:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No changes provided")
        if user_id == self.user.id and changes.get("role") not in (None, "ADMIN"):
            raise HTTPException(status_code=400, detail="You cannot remove your own admin role")

        if changes.get("role"):
            changes["role"] = MARKETPLACE_ROLES[changes["role"]]
        if changes.get("name"):
            changes["name"] = sanitize_string(changes["name"])

        try:
            result = await self.marketplace.patch(f"/api/admin/users/{user_id}", json=changes)
        except MarketplaceError as e:
            raise_not_found(e, "User")
        logger.info(f"👤 Admin {self.user.id} updated user {user_id}: {sorted(changes)}")
        return present_user(item_of(result, "user"))

    async def delete_user(self, user_id: str) -> None:
        if user_id == self.user.id:
            raise HTTPException(status_code=400, detail="You cannot delete your own account here")
        try:
            await self.marketplace.delete(f"/api/admin/users/{user_id}")
        except MarketplaceError as e:
            raise_not_found(e, "User")
        logger.info(f"🗑️ Admin {self.user.id} deleted user {user_id}")

    # ------------------------------------------------------------------
    # Vendors
    # ------------------------------------------------------------------

    async def list_vendors(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        category_id: Optional[str] = None,
        city_id: Optional[str] = None,
        featured: Optional[bool] = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        if status and status.upper() not in PROVIDER_STATUSES:
            raise HTTPException(status_code=400, detail=f"Unknown vendor status: {status}")
        payload = await self.marketplace.get(
            "/api/admin/providers",
            params={
                "search": search.strip() if search else None,
                "status": status.upper() if status else None,
                "categoryId": category_id,
                "cityId": city_id,
                "featured": None if featured is None else str(featured).lower(),
                "page": page,
                "limit": limit,
            },
        )
        payload = payload if isinstance(payload, dict) else {"providers": payload}
        result = {"providers": items_of(payload, "providers"), "pagination": payload.get("pagination")}
        if payload.get("statusCounts") is not None:
            result["statusCounts"] = payload["statusCounts"]
        return result

    async def get_vendor(self, provider_id: str) -> dict:
        try:
            payload = await self.marketplace.get(f"/api/providers/{provider_id}")
        except MarketplaceError as e:
            raise_not_found(e, "Vendor")
        return item_of(payload, "provider")

    async def create_vendor(self, data: VendorCreate) -> dict:
        """
        Create a provider profile through the marketplace.

        The marketplace makes the signed-in caller the owner and ignores
        ownerUserId, so the admin ends up owning the new provider and gets a
        400 when they already own one. ownerUserId is still sent and logged
        as the intended owner; handing the profile over is done on the
        marketplace side.
        """
        payload = sanitize_dict(data.model_dump(exclude_none=True), VENDOR_TEXT_FIELDS)
        result = await self.marketplace.post("/api/providers", json=payload)
        provider = item_of(result, "provider")
        owner = provider.get("ownerUserId")
        if owner and owner != data.ownerUserId:
            logger.warning(
                f"⚠️ Vendor {provider.get('id')} is owned by {owner}, not the requested user {data.ownerUserId}"
            )
        logger.info(f"🏪 Admin {self.user.id} created vendor {provider.get('id')} for user {data.ownerUserId}")
        return provider

    async def update_vendor(self, provider_id: str, data: VendorUpdate) -> dict:
        changes = sanitize_dict(data.model_dump(exclude_unset=True), VENDOR_TEXT_FIELDS)
        if not changes:
            raise HTTPException(status_code=400, detail="No changes provided")
        try:
            result = await self.marketplace.patch(f"/api/providers/{provider_id}", json=changes)
        except MarketplaceError as e:
            raise_not_found(e, "Vendor")
        return item_of(result, "provider")

    async def verify_vendor(self, provider_id: str, data: VendorVerify) -> dict:
        body = data.model_dump(exclude_none=True)
        if body.get("adminNotes"):
            body["adminNotes"] = sanitize_string(body["adminNotes"])
        try:
            result = await self.marketplace.patch(f"/api/admin/providers/{provider_id}/verify", json=body)
        except MarketplaceError as e:
            raise_not_found(e, "Vendor")
        logger.info(f"✅ Vendor {provider_id} verification set to {data.isVerified} by admin {self.user.id}")
        return item_of(result, "provider")

    async def moderate_vendor(self, provider_id: str, data: VendorModerate) -> dict:
        body = without_none({"action": data.action, "reason": sanitize_string(data.reason) if data.reason else None})
        try:
            result = await self.marketplace.post(f"/api/admin/providers/{provider_id}/moderate", json=body)
        except MarketplaceError as e:
            raise_not_found(e, "Vendor")
        logger.info(f"🛡️ Vendor {provider_id}: {data.action} by admin {self.user.id}")
        default_message = f"Provider {MODERATION_RESULTS[data.action]} successfully"
        return {
            "message": (result or {}).get("message") or default_message,
            "provider": item_of(result, "provider"),
        }

    async def delete_vendor(self, provider_id: str) -> None:
        try:
            await self.marketplace.delete(f"/api/admin/providers/{provider_id}")
        except MarketplaceError as e:
            raise_not_found(e, "Vendor")
        logger.info(f"🗑️ Vendor {provider_id} deleted by admin {self.user.id}")

    # ------------------------------------------------------------------
    # Categories, cities and tags
    # ------------------------------------------------------------------

    async def list_reference(self, kind: str, search: Optional[str] = None) -> list:
        if kind == "tags":
            # Admin listing includes inactive tags, so it bypasses the public cache
            payload = await self.marketplace.get("/api/admin/tags", params={"search": search})
            return items_of(payload, "tags")

        rows = await (get_categories(self.marketplace) if kind == "categories" else get_cities(self.marketplace))
        if search and search.strip():
            needle = search.strip().lower()
            rows = [r for r in rows if needle in (r.get("name") or "").lower()]
        return rows

    async def create_reference(self, kind: str, data) -> dict:
        """Create a category, city or tag; the slug defaults to slugify(name)"""
        collection, _, key = REFERENCE_ENDPOINTS[kind]
        body = data.model_dump(exclude_none=True)
        body["slug"] = body.get("slug") or self._slug_from(body["name"])
        body["name"] = sanitize_string(body["name"])

        result = await self.marketplace.post(collection, json=body)
        invalidate_reference_data(kind)
        logger.info(f"➕ Admin {self.user.id} created {key} {body['slug']}")
        return item_of(result, key)

    async def update_reference(self, kind: str, record_id: str, data) -> dict:
        _, item_path, key = REFERENCE_ENDPOINTS[kind]
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No changes provided")
        if changes.get("name"):
            changes["name"] = sanitize_string(changes["name"])

        try:
            result = await self.marketplace.patch(item_path.format(id=record_id), json=changes)
        except MarketplaceError as e:
            raise_not_found(e, key.capitalize())
        invalidate_reference_data(kind)
        return item_of(result, key)

    async def delete_reference(self, kind: str, record_id: str) -> None:
        _, item_path, key = REFERENCE_ENDPOINTS[kind]
        try:
            await self.marketplace.delete(item_path.format(id=record_id))
        except MarketplaceError as e:
            raise_not_found(e, key.capitalize())
        invalidate_reference_data(kind)
        logger.info(f"🗑️ Admin {self.user.id} deleted {key} {record_id}")

    @staticmethod
    def _slug_from(name: str) -> str:
        try:
            return validate_slug(slugify(name))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Cannot derive a slug from '{name}': {e}") from e

    # ------------------------------------------------------------------
    # Reviews, quotes, notifications
    # ------------------------------------------------------------------

    async def list_reviews(self, status: Optional[str] = None, page: int = 1, limit: int = 20) -> dict:
        if status and status.upper() not in REVIEW_STATUSES:
            raise HTTPException(status_code=400, detail=f"Unknown review status: {status}")
        payload = await self.marketplace.get(
            "/api/admin/reviews",
            params={"status": status.lower() if status else None, "page": page, "limit": limit},
        )
        payload = payload if isinstance(payload, dict) else {"reviews": payload}
        return {
            "reviews": items_of(payload, "reviews"),
            "pagination": payload.get("pagination"),
            "statusCounts": payload.get("statusCounts") or {},
        }

    async def moderate_review(self, review_id: str, data: ReviewModerate) -> dict:
        body = without_none(
            {"action": REVIEW_ACTIONS[data.status], "reason": sanitize_string(data.reason) if data.reason else None}
        )
        try:
            result = await self.marketplace.post(f"/api/reviews/{review_id}/moderate", json=body)
        except MarketplaceError as e:
            raise_not_found(e, "Review")
        logger.info(f"🛡️ Review {review_id} moderated to {data.status} by admin {self.user.id}")
        return item_of(result, "review")

    async def list_quotes(self, status: Optional[str] = None, page: int = 1, limit: int = 20) -> dict:
        payload = await self.marketplace.get("/api/quotes", params={"status": status, "page": page, "limit": limit})
        return {
            "quotes": items_of(payload, "quotes"),
            "pagination": payload.get("pagination") if isinstance(payload, dict) else None,
        }

    async def list_notifications(self, page: int = 1, limit: int = 20) -> dict:
        payload = await self.marketplace.get("/api/notifications", params={"page": page, "limit": limit})
        return {
            "notifications": items_of(payload, "notifications"),
            "pagination": payload.get("pagination") if isinstance(payload, dict) else None,
        }

    # ------------------------------------------------------------------
    # Audit logs
    # ------------------------------------------------------------------

    async def list_audit_logs(self, query: AuditLogQuery) -> dict:
        payload = await self.marketplace.get("/api/admin/audit-logs", params=query.to_params())
        payload = payload if isinstance(payload, dict) else {"logs": payload}
        result = {"logs": items_of(payload, "logs"), "pagination": payload.get("pagination")}
        if payload.get("filters") is not None:
            # action and entity type counts for the filter dropdowns
            result["filters"] = payload["filters"]
        return result

    async def export_audit_logs(self, query: AuditLogQuery) -> tuple[str, str]:
        """Returns (filename, csv text) for the filtered logs"""
        query = query.model_copy(update={"page": 1, "limit": AUDIT_EXPORT_LIMIT})
        logs = (await self.list_audit_logs(query))["logs"]
        logger.info(f"📤 Admin {self.user.id} exported {len(logs)} audit log entries")
        return dated_filename("audit-logs", "csv"), audit_logs_csv(logs)

    # ------------------------------------------------------------------
    # Data export / import
    # ------------------------------------------------------------------

    async def export_data(self, data: ExportRequest) -> tuple[str, str, bytes]:
        """Returns (filename, media type, body) of the marketplace export"""
        response = await self.marketplace.get_raw(
            "POST", "/api/admin/export", json=data.model_dump(exclude_none=True)
        )
        media_type = "text/csv" if data.format == "csv" else "application/json"
        filename = dated_filename(f"{data.type}-export", data.format)
        logger.info(f"📤 Admin {self.user.id} exported {data.type} as {data.format} ({len(response.content)} bytes)")
        return filename, media_type, response.content

    async def list_import_jobs(self, page: int = 1, limit: int = 20) -> dict:
        payload = await self.marketplace.get("/api/admin/import", params={"page": page, "limit": limit})
        return {
            "jobs": items_of(payload, "jobs"),
            "pagination": payload.get("pagination") if isinstance(payload, dict) else None,
        }

    async def submit_import(self, data: ImportRequest) -> dict:
        result = await self.marketplace.post("/api/admin/import", json=data.model_dump())
        mode = "dry run" if data.isDryRun else "import"
        logger.info(f"📥 Admin {self.user.id} submitted {data.type} {mode} ({len(data.data)} rows)")
        return result or {}
