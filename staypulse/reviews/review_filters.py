"""
Filter & sort engine for canonical reviews.

All predicates are conjunctive and an inactive filter ("all", 0, "", False)
is skipped. Results are new lists; inputs are never reordered in place.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from .review_models import (
    ALL,
    TIME_RANGE_DAYS,
    CanonicalReview,
    FilterConfiguration,
    SortOrder,
    TimeRange,
)
from .review_time import utc_now

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def search_haystack(review: CanonicalReview) -> str:
    return f"{review.property_name} {review.guest_name} {review.public_review or ''}".lower()


def matches_filters(
    review: CanonicalReview,
    filters: FilterConfiguration,
    now: datetime,
) -> bool:
    """True when the review passes every active predicate."""
    if filters.channel != ALL and review.channel != filters.channel:
        return False
    if filters.review_type != ALL and review.review_type != filters.review_type:
        return False
    if filters.category != ALL and not review.has_category(filters.category):
        return False
    if filters.min_rating > 0 and (review.rating5 or 0) < filters.min_rating:
        return False
    if filters.time_range != TimeRange.ALL:
        max_days = TIME_RANGE_DAYS[filters.time_range]
        age_days = (now - review.submitted_time).total_seconds() / SECONDS_PER_DAY
        if age_days > max_days:
            return False
    if filters.approved_only and not review.is_approved:
        return False
    if filters.search_term:
        if filters.search_term.lower() not in search_haystack(review):
            return False
    return True


def sort_reviews(reviews: Iterable[CanonicalReview], sort_by: SortOrder = SortOrder.RECENT) -> List[CanonicalReview]:
    """
    Order reviews by submission time or 5-point rating (None counts as 0).

    sorted() is stable, also with reverse=True, so ties keep input order.
    """
    if sort_by == SortOrder.HIGHEST:
        return sorted(reviews, key=lambda r: r.rating5 or 0, reverse=True)
    if sort_by == SortOrder.LOWEST:
        return sorted(reviews, key=lambda r: r.rating5 or 0)
    if sort_by == SortOrder.OLDEST:
        return sorted(reviews, key=lambda r: r.submitted_time)
    return sorted(reviews, key=lambda r: r.submitted_time, reverse=True)


def apply_filters(
    reviews: Iterable[CanonicalReview],
    filters: Optional[FilterConfiguration] = None,
    now: Optional[datetime] = None,
) -> List[CanonicalReview]:
    """
    Filter then sort a review collection.

    Args:
        reviews: Canonical reviews (not modified)
        filters: Active configuration; defaults to no filtering, most recent first
        now: Evaluation instant for the time-range filter (default: current UTC time)

    Returns:
        New list of the matching reviews in the requested order.
    """
    filters = filters or FilterConfiguration()
    now = now or utc_now()

    filtered = [r for r in reviews if matches_filters(r, filters, now)]
    result = sort_reviews(filtered, filters.sort_by)

    logger.debug(f"Filters kept {len(result)} reviews (sort={filters.sort_by.value})")
    return result
