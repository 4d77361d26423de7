"""
StayPulse Review Engine
=======================

Pure normalization and derived-metrics pipeline for guest reviews.

Modules:
    review_models: raw/canonical entities, filters and derived views
    ratings: 10-point to 5-point conversion and rounding
    review_signals: keyword lexicon tag/issue detection
    review_time: timestamp parsing and display labels
    normalizer: raw record to CanonicalReview
    review_filters: filter & sort engine
    review_insights: aggregation into dashboard views
"""

from .review_models import (
    ALL,
    AvailableFilters,
    CanonicalReview,
    CategoryKey,
    CategoryScore,
    Channel,
    DashboardView,
    DuplicateReviewError,
    FilterConfiguration,
    LeaderboardEntry,
    ListingPerformance,
    RawReview,
    ReviewContractError,
    ReviewTotals,
    ReviewType,
    SortOrder,
    TimeRange,
)
from .ratings import round_to, to_five_point
from .review_signals import ReviewSignalExtractor, detect_insights, TAG_LEXICON, ISSUE_LEXICON
from .normalizer import normalize_review, normalize_reviews, normalize_records
from .review_filters import apply_filters, sort_reviews
from .review_insights import ReviewInsightAggregator, build_dashboard
