"""Admin portal router - users, vendors, reference data, moderation and data tools"""

import logging
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response, StreamingResponse

from ...auth import get_marketplace, require_admin
from ...schemas import MessageResponse, SessionUser
from ...services.marketplace_client import MarketplaceClient
from ...routes.jobs import enqueue_job
from .schemas import (
    AdminUserUpdate,
    AuditLogQuery,
    CategoryCreate,
    CategoryUpdate,
    CityCreate,
    CityUpdate,
    ExportRequest,
    ImportRequest,
    JobQueuedResponse,
    ReviewModerate,
    TagCreate,
    TagUpdate,
    VendorCreate,
    VendorModerate,
    VendorUpdate,
    VendorVerify,
)
from .service import AdminService, parse_import_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

MAX_IMPORT_FILE_SIZE = 5 * 1024 * 1024


def get_admin_service(
    current_user: SessionUser = Depends(require_admin),
    marketplace: MarketplaceClient = Depends(get_marketplace),
) -> AdminService:
    return AdminService(marketplace, current_user)


def _csv_download(filename: str, body: str) -> StreamingResponse:
    return StreamingResponse(
        iter([body]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Cache-Control": "no-cache",
        },
    )


def _audit_query(
    action: Optional[str] = Query(None),
    entityType: Optional[str] = Query(None),
    userId: Optional[str] = Query(None),
    startDate: Optional[datetime] = Query(None),
    endDate: Optional[datetime] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
) -> AuditLogQuery:
    if startDate and endDate and startDate > endDate:
        raise HTTPException(status_code=400, detail="Start date must be before end date")
    return AuditLogQuery(
        action=action,
        entityType=entityType,
        userId=userId,
        startDate=startDate,
        endDate=endDate,
        page=page,
        limit=limit,
    )


# ============================================================================
# USERS
# ============================================================================


@router.get("/users")
async def list_users(
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_users(search, role, status, page, limit)


@router.get("/users/{user_id}")
async def get_user(user_id: str, service: AdminService = Depends(get_admin_service)):
    return await service.get_user(user_id)


@router.patch("/users/{user_id}")
async def update_user(user_id: str, data: AdminUserUpdate, service: AdminService = Depends(get_admin_service)):
    return await service.update_user(user_id, data)


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, service: AdminService = Depends(get_admin_service)):
    await service.delete_user(user_id)
    return {"message": "User deleted successfully"}


# ============================================================================
# VENDORS
# ============================================================================


@router.get("/vendors")
async def list_vendors(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    categoryId: Optional[str] = Query(None),
    cityId: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_vendors(search, status, categoryId, cityId, featured, page, limit)


@router.post("/vendors", status_code=201)
async def create_vendor(data: VendorCreate, service: AdminService = Depends(get_admin_service)):
    return await service.create_vendor(data)


@router.get("/vendors/{provider_id}")
async def get_vendor(provider_id: str, service: AdminService = Depends(get_admin_service)):
    return await service.get_vendor(provider_id)


@router.patch("/vendors/{provider_id}")
async def update_vendor(provider_id: str, data: VendorUpdate, service: AdminService = Depends(get_admin_service)):
    return await service.update_vendor(provider_id, data)


@router.patch("/vendors/{provider_id}/verify")
async def verify_vendor(provider_id: str, data: VendorVerify, service: AdminService = Depends(get_admin_service)):
    return await service.verify_vendor(provider_id, data)


@router.post("/vendors/{provider_id}/moderate")
async def moderate_vendor(
    provider_id: str, data: VendorModerate, service: AdminService = Depends(get_admin_service)
):
    return await service.moderate_vendor(provider_id, data)


@router.delete("/vendors/{provider_id}", response_model=MessageResponse)
async def delete_vendor(provider_id: str, service: AdminService = Depends(get_admin_service)):
    await service.delete_vendor(provider_id)
    return {"message": "Provider deleted successfully"}


# ============================================================================
# CATEGORIES, CITIES, TAGS
# ============================================================================


@router.get("/categories")
async def list_categories(search: Optional[str] = Query(None), service: AdminService = Depends(get_admin_service)):
    return {"categories": await service.list_reference("categories", search)}


@router.post("/categories", status_code=201)
async def create_category(data: CategoryCreate, service: AdminService = Depends(get_admin_service)):
    return await service.create_reference("categories", data)


@router.patch("/categories/{category_id}")
async def update_category(
    category_id: str, data: CategoryUpdate, service: AdminService = Depends(get_admin_service)
):
    return await service.update_reference("categories", category_id, data)


@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(category_id: str, service: AdminService = Depends(get_admin_service)):
    await service.delete_reference("categories", category_id)
    return {"message": "Category deleted successfully"}


@router.get("/cities")
async def list_cities(search: Optional[str] = Query(None), service: AdminService = Depends(get_admin_service)):
    return {"cities": await service.list_reference("cities", search)}


@router.post("/cities", status_code=201)
async def create_city(data: CityCreate, service: AdminService = Depends(get_admin_service)):
    return await service.create_reference("cities", data)


@router.patch("/cities/{city_id}")
async def update_city(city_id: str, data: CityUpdate, service: AdminService = Depends(get_admin_service)):
    return await service.update_reference("cities", city_id, data)


@router.delete("/cities/{city_id}", response_model=MessageResponse)
async def delete_city(city_id: str, service: AdminService = Depends(get_admin_service)):
    await service.delete_reference("cities", city_id)
    return {"message": "City deleted successfully"}


@router.get("/tags")
async def list_tags(search: Optional[str] = Query(None), service: AdminService = Depends(get_admin_service)):
    return {"tags": await service.list_reference("tags", search)}


@router.post("/tags", status_code=201)
async def create_tag(data: TagCreate, service: AdminService = Depends(get_admin_service)):
    return await service.create_reference("tags", data)


@router.patch("/tags/{tag_id}")
async def update_tag(tag_id: str, data: TagUpdate, service: AdminService = Depends(get_admin_service)):
    return await service.update_reference("tags", tag_id, data)


@router.delete("/tags/{tag_id}", response_model=MessageResponse)
async def delete_tag(tag_id: str, service: AdminService = Depends(get_admin_service)):
    await service.delete_reference("tags", tag_id)
    return {"message": "Tag deleted successfully"}


# ============================================================================
# REVIEWS, QUOTES, NOTIFICATIONS
# ============================================================================


@router.get("/reviews")
async def list_reviews(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_reviews(status, page, limit)


@router.post("/reviews/{review_id}/moderate")
async def moderate_review(review_id: str, data: ReviewModerate, service: AdminService = Depends(get_admin_service)):
    return await service.moderate_review(review_id, data)


@router.get("/quotes")
async def list_quotes(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_quotes(status, page, limit)


@router.get("/notifications")
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_notifications(page, limit)


# ============================================================================
# AUDIT LOGS
# ============================================================================


@router.get("/audit-logs")
async def list_audit_logs(
    query: AuditLogQuery = Depends(_audit_query), service: AdminService = Depends(get_admin_service)
):
    return await service.list_audit_logs(query)


@router.get("/audit-logs/export")
async def export_audit_logs(
    query: AuditLogQuery = Depends(_audit_query), service: AdminService = Depends(get_admin_service)
):
    """Download the filtered audit log (up to 1000 rows) as CSV"""
    filename, body = await service.export_audit_logs(query)
    return _csv_download(filename, body)


# ============================================================================
# DATA EXPORT / IMPORT
# ============================================================================


@router.post("/data/export")
async def export_data(data: ExportRequest, service: AdminService = Depends(get_admin_service)):
    filename, media_type, body = await service.export_data(data)
    return Response(
        content=body,
        media_type=media_type,
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Cache-Control": "no-cache",
        },
    )


@router.get("/data/imports")
async def list_import_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_import_jobs(page, limit)


@router.post("/data/import")
async def submit_import(data: ImportRequest, service: AdminService = Depends(get_admin_service)):
    return await service.submit_import(data)


@router.post("/data/import/csv")
async def submit_import_csv(
    type: Literal["providers", "categories", "cities", "culture_tags"] = Form(...),
    isDryRun: bool = Form(False),
    file: UploadFile = File(...),
    service: AdminService = Depends(get_admin_service),
):
    """Upload a CSV file; rows are keyed by the header line"""
    content = await file.read()
    if len(content) > MAX_IMPORT_FILE_SIZE:
        raise HTTPException(status_code=400, detail="File too large. Maximum size is 5MB")
    try:
        rows = parse_import_csv(content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    logger.info(f"📥 Parsed {len(rows)} rows from {file.filename}")
    return await service.submit_import(ImportRequest(type=type, data=rows, isDryRun=isDryRun))


# ============================================================================
# MAINTENANCE
# ============================================================================


@router.post("/maintenance/normalize-category-slugs", status_code=202, response_model=JobQueuedResponse)
async def normalize_category_slugs(current_user: SessionUser = Depends(require_admin)):
    """Queue the category slug normalization job; poll /jobs/status/{jobId}"""
    job_id = await enqueue_job("normalize_category_slugs_task")
    logger.info(f"🏷️ Admin {current_user.id} queued category slug normalization ({job_id})")
    return {"jobId": job_id, "status": "queued"}
