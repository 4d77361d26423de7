"""
StayPulse API Models
====================

Pydantic models for the dashboard REST API responses and request bodies.
Field names follow the engine's ``to_dict()`` output.
"""

from pydantic import BaseModel, Field
from typing import List, Dict, Optional


class CategoryScoreModel(BaseModel):
    key: str
    label: str
    score10: float
    score5: Optional[float] = None


class ReviewModel(BaseModel):
    """One canonical review."""
    id: str
    listing_id: str
    property_name: str
    location: str
    channel: str
    review_type: str
    rating5: Optional[float] = None
    rating10: Optional[float] = None
    submitted_at: str
    submitted_date_label: str
    guest_name: str
    public_review: Optional[str] = None
    private_note: Optional[str] = None
    stay_length: int = 0
    categories: List[CategoryScoreModel] = []
    category_average5: Optional[float] = None
    tags: List[str] = []
    issues: List[str] = []
    is_approved: bool = False


class LeaderboardEntryModel(BaseModel):
    label: str
    count: int


class ListingPerformanceModel(BaseModel):
    listing_id: str
    property_name: str
    location: str
    review_count: int
    avg_rating5: Optional[float] = None
    last_review_date: str
    category_averages: Dict[str, Optional[float]]
    channel_mix: Dict[str, int]


class TotalsModel(BaseModel):
    reviews: int
    properties: int
    avg_rating5: Optional[float] = None
    channels: int


class FiltersModel(BaseModel):
    channel: str
    review_type: str
    category: str
    min_rating: float
    time_range: str
    search_term: str
    sort_by: str
    approved_only: bool


class AvailableFiltersModel(BaseModel):
    channels: List[str]
    categories: List[str]
    review_types: List[str]


class DashboardResponse(BaseModel):
    """Every dashboard view for one query, plus controller state."""
    filtered_reviews: List[ReviewModel]
    approved_reviews: List[ReviewModel]
    property_performance: List[ListingPerformanceModel]
    channel_breakdown: Dict[str, int]
    category_health: Dict[str, Optional[float]]
    issue_leaderboard: List[LeaderboardEntryModel]
    tag_highlights: List[LeaderboardEntryModel]
    totals: TotalsModel
    filters: FiltersModel
    available_filters: AvailableFiltersModel
    loading: bool = False
    error: Optional[str] = None
    last_generated_at: Optional[str] = None


class ApprovedReviewsResponse(BaseModel):
    listing_id: Optional[str] = None
    count: int
    reviews: List[ReviewModel]


class RefreshResponse(BaseModel):
    reviews_loaded: int
    last_generated_at: Optional[str] = None


class ApprovalResponse(BaseModel):
    review_id: str
    is_approved: bool


class BulkApprovalRequest(BaseModel):
    review_ids: List[int] = Field(default_factory=list)
    is_approved: bool


class BulkApprovalResponse(BaseModel):
    updated: int
    is_approved: bool


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str
    reviews_loaded: int
    last_generated_at: Optional[str] = None
    error: Optional[str] = None
