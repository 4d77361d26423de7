"""
Review Dashboard API Routes
===========================

GET   /api/dashboard                          - filtered dashboard views
POST  /api/dashboard/refresh                  - reload reviews from the service
GET   /api/dashboard/approved                 - approved (public-site) reviews
PATCH /api/dashboard/reviews/{id}/approval    - toggle one review's approval
PATCH /api/dashboard/reviews/approval/bulk    - set approval for several reviews

Upstream failures map to 502, unknown reviews to 404, invalid filters to 422.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from ..orchestrator.dashboard_state import ReviewDashboard
from ..reviews.review_models import ALL, DuplicateReviewError, FilterConfiguration, SortOrder, TimeRange
from .models import (
    ApprovalResponse,
    ApprovedReviewsResponse,
    BulkApprovalRequest,
    BulkApprovalResponse,
    DashboardResponse,
    RefreshResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


def get_dashboard(request: Request) -> ReviewDashboard:
    return request.app.state.dashboard


@router.get("", response_model=DashboardResponse)
def get_dashboard_view(
    request: Request,
    channel: str = Query(ALL, description="Channel or 'all'"),
    review_type: str = Query(ALL, description="host-to-guest, guest-to-host or 'all'"),
    category: str = Query(ALL, description="Category key or 'all'"),
    min_rating: float = Query(0, ge=0, le=5, description="Minimum 5-point rating"),
    time_range: str = Query(TimeRange.ALL.value, description="all, 30d, 60d or 90d"),
    search: str = Query("", description="Case-insensitive text search"),
    sort_by: str = Query(SortOrder.RECENT.value, description="recent, oldest, highest or lowest"),
    approved_only: bool = Query(False),
):
    """Dashboard views for the given filters. Loads reviews on first use."""
    dashboard = get_dashboard(request)

    try:
        filters = FilterConfiguration(
            channel=channel,
            review_type=review_type,
            category=category,
            min_rating=min_rating,
            time_range=time_range,
            search_term=search,
            sort_by=sort_by,
            approved_only=approved_only,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if not dashboard.ensure_loaded() and dashboard.error:
        raise HTTPException(status_code=502, detail=dashboard.error)

    try:
        view = dashboard.view(filters)
    except DuplicateReviewError as e:
        logger.error(f"Dashboard build failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    payload = view.to_dict()
    return DashboardResponse(
        **payload,
        filters=filters.to_dict(),
        available_filters=dashboard.available_filters.to_dict(),
        loading=dashboard.loading,
        error=dashboard.error,
        last_generated_at=dashboard.last_generated_at,
    )


@router.post("/refresh", response_model=RefreshResponse)
def refresh_reviews(request: Request):
    """Force a reload from the reviews service."""
    dashboard = get_dashboard(request)
    if not dashboard.fetch_reviews(force=True):
        raise HTTPException(status_code=502, detail=dashboard.error or "Unable to load reviews")
    return RefreshResponse(
        reviews_loaded=len(dashboard.reviews),
        last_generated_at=dashboard.last_generated_at,
    )


@router.get("/approved", response_model=ApprovedReviewsResponse)
def get_approved_reviews(
    request: Request,
    listing_id: Optional[str] = Query(None, description="Restrict to one listing"),
):
    """Approved reviews as the public site would show them."""
    dashboard = get_dashboard(request)
    if not dashboard.fetch_approved_reviews(listing_id, force=True):
        raise HTTPException(
            status_code=502,
            detail=dashboard.public_error or "Unable to load approved reviews",
        )
    reviews = dashboard.approved_for_listing(listing_id)
    return ApprovedReviewsResponse(
        listing_id=listing_id,
        count=len(reviews),
        reviews=[r.to_dict() for r in reviews],
    )


@router.patch("/reviews/approval/bulk", response_model=BulkApprovalResponse)
def bulk_set_approval(request: Request, body: BulkApprovalRequest):
    """Set the approval flag on several reviews. An empty list changes nothing."""
    dashboard = get_dashboard(request)
    if not body.review_ids:
        return BulkApprovalResponse(updated=0, is_approved=body.is_approved)

    try:
        applied = dashboard.bulk_toggle_approval(body.review_ids, body.is_approved)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if not applied:
        raise HTTPException(status_code=502, detail=dashboard.error or "Unable to update approvals")
    return BulkApprovalResponse(updated=len(body.review_ids), is_approved=body.is_approved)


@router.patch("/reviews/{review_id}/approval", response_model=ApprovalResponse)
def toggle_review_approval(request: Request, review_id: str):
    """Flip one review's approval flag."""
    dashboard = get_dashboard(request)
    dashboard.ensure_loaded()

    if dashboard.find_review(review_id) is None:
        raise HTTPException(status_code=404, detail=f"Review {review_id} not found")

    if not dashboard.toggle_approval(review_id):
        raise HTTPException(status_code=502, detail=dashboard.error or "Unable to update approval")

    updated = dashboard.find_review(review_id)
    return ApprovalResponse(review_id=updated.id, is_approved=updated.is_approved)
