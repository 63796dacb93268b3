"""Engagement routers - inquiries, quotes, reviews and notifications"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import get_current_user, get_marketplace, require_vendor
from ...schemas import MessageResponse, SessionUser
from ...services.marketplace_client import MarketplaceClient
from .schemas import (
    InquiryReply,
    InquiryStatusUpdate,
    QuoteAccept,
    QuoteCreate,
    QuoteDecline,
    ReviewCreate,
    ReviewReport,
    ReviewResponseCreate,
    ReviewUpdate,
)
from .service import InquiryService, NotificationService, QuoteService, ReviewService

logger = logging.getLogger(__name__)

inquiries_router = APIRouter(prefix="/inquiries", tags=["Inquiries"])
vendor_inquiries_router = APIRouter(prefix="/vendor/inquiries", tags=["Vendor Inquiries"])
quotes_router = APIRouter(prefix="/quotes", tags=["Quotes"])
vendor_quotes_router = APIRouter(prefix="/vendor/quotes", tags=["Vendor Quotes"])
reviews_router = APIRouter(prefix="/reviews", tags=["Reviews"])
vendor_reviews_router = APIRouter(prefix="/vendor/reviews", tags=["Vendor Reviews"])
notifications_router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_inquiry_service(marketplace: MarketplaceClient = Depends(get_marketplace)) -> InquiryService:
    return InquiryService(marketplace)


def get_quote_service(marketplace: MarketplaceClient = Depends(get_marketplace)) -> QuoteService:
    return QuoteService(marketplace)


def get_review_service(marketplace: MarketplaceClient = Depends(get_marketplace)) -> ReviewService:
    return ReviewService(marketplace)


def get_notification_service(marketplace: MarketplaceClient = Depends(get_marketplace)) -> NotificationService:
    return NotificationService(marketplace)


# ============================================================================
# INQUIRIES
# ============================================================================


@inquiries_router.get("")
async def list_my_inquiries(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: SessionUser = Depends(get_current_user),
    service: InquiryService = Depends(get_inquiry_service),
):
    return await service.list_inquiries(status, page, limit)


@inquiries_router.get("/{inquiry_id}")
async def get_inquiry(
    inquiry_id: str,
    current_user: SessionUser = Depends(get_current_user),
    service: InquiryService = Depends(get_inquiry_service),
):
    return await service.get_inquiry(inquiry_id)


@inquiries_router.post("/{inquiry_id}/messages", status_code=201)
async def reply_to_inquiry(
    inquiry_id: str,
    data: InquiryReply,
    current_user: SessionUser = Depends(get_current_user),
    service: InquiryService = Depends(get_inquiry_service),
):
    return await service.reply(inquiry_id, data.text, current_user)


@vendor_inquiries_router.get("")
async def list_vendor_inquiries(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: SessionUser = Depends(require_vendor),
    service: InquiryService = Depends(get_inquiry_service),
):
    return await service.list_inquiries(status, page, limit)


@vendor_inquiries_router.patch("/{inquiry_id}/status")
async def update_inquiry_status(
    inquiry_id: str,
    data: InquiryStatusUpdate,
    current_user: SessionUser = Depends(require_vendor),
    service: InquiryService = Depends(get_inquiry_service),
):
    return await service.update_status(inquiry_id, data.status)


# ============================================================================
# QUOTES
# ============================================================================


@quotes_router.get("")
async def list_my_quotes(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: SessionUser = Depends(get_current_user),
    service: QuoteService = Depends(get_quote_service),
):
    return await service.list_quotes(status, page, limit)


@quotes_router.get("/{quote_id}")
async def get_quote(
    quote_id: str,
    current_user: SessionUser = Depends(get_current_user),
    service: QuoteService = Depends(get_quote_service),
):
    return await service.get_quote(quote_id)


@quotes_router.post("/{quote_id}/accept")
async def accept_quote(
    quote_id: str,
    data: QuoteAccept,
    current_user: SessionUser = Depends(get_current_user),
    service: QuoteService = Depends(get_quote_service),
):
    """Accept a quote and, for online payment modes, get the checkout URL"""
    return await service.accept(quote_id, data, current_user)


@quotes_router.post("/{quote_id}/decline")
async def decline_quote(
    quote_id: str,
    data: Optional[QuoteDecline] = None,
    current_user: SessionUser = Depends(get_current_user),
    service: QuoteService = Depends(get_quote_service),
):
    return await service.decline(quote_id, data or QuoteDecline())


@vendor_quotes_router.get("")
async def list_vendor_quotes(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: SessionUser = Depends(require_vendor),
    service: QuoteService = Depends(get_quote_service),
):
    return await service.list_quotes(status, page, limit)


@vendor_quotes_router.post("", status_code=201)
async def create_quote(
    data: QuoteCreate,
    current_user: SessionUser = Depends(require_vendor),
    service: QuoteService = Depends(get_quote_service),
):
    return await service.create(data)


@vendor_quotes_router.post("/{quote_id}/send")
async def send_quote(
    quote_id: str,
    current_user: SessionUser = Depends(require_vendor),
    service: QuoteService = Depends(get_quote_service),
):
    return await service.send(quote_id)


# ============================================================================
# REVIEWS
# ============================================================================


@reviews_router.get("")
async def list_my_reviews(
    current_user: SessionUser = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return await service.my_reviews()


@reviews_router.post("", status_code=201)
async def create_review(
    data: ReviewCreate,
    current_user: SessionUser = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return await service.create(data, current_user)


@reviews_router.patch("/{review_id}")
async def update_review(
    review_id: str,
    data: ReviewUpdate,
    current_user: SessionUser = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return await service.update(review_id, data)


@reviews_router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: str,
    current_user: SessionUser = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    await service.delete(review_id)
    return {"message": "Review deleted"}


@reviews_router.post("/{review_id}/report", response_model=MessageResponse)
async def report_review(
    review_id: str,
    data: ReviewReport,
    current_user: SessionUser = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return await service.report(review_id, data)


@vendor_reviews_router.get("")
async def list_vendor_reviews(
    rating: Optional[int] = Query(None, ge=1, le=5),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: SessionUser = Depends(require_vendor),
    service: ReviewService = Depends(get_review_service),
):
    return await service.vendor_reviews(rating, page, limit)


@vendor_reviews_router.post("/{review_id}/respond", status_code=201)
async def respond_to_review(
    review_id: str,
    data: ReviewResponseCreate,
    current_user: SessionUser = Depends(require_vendor),
    service: ReviewService = Depends(get_review_service),
):
    return await service.respond(review_id, data.content)


# ============================================================================
# NOTIFICATIONS
# ============================================================================


@notifications_router.get("")
async def list_notifications(
    unread: bool = Query(False),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: SessionUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.list_notifications(unread, page, limit)


@notifications_router.get("/unread-count")
async def unread_count(
    current_user: SessionUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.unread_count()


@notifications_router.post("/read-all")
async def mark_all_read(
    current_user: SessionUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.mark_all_read()


@notifications_router.patch("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    current_user: SessionUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.mark_read(notification_id)
