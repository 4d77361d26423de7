"""
Review Insight Aggregator
==========================

Derives the dashboard views from canonical reviews:

    category_health: per-category 5-point averages (filtered set)
    channel_breakdown: review counts per channel (filtered set)
    issue_leaderboard: most frequent issues (full set)
    tag_highlights: most frequent highlight tags (full set)
    summarize_listings: per-listing performance (filtered set)
    derive_totals: headline totals (full set)

Usage:
    aggregator = ReviewInsightAggregator()
    view = aggregator.build_dashboard(reviews, FilterConfiguration(channel="airbnb"))
"""

import logging
from collections import Counter, OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from .ratings import average, round_to
from .review_filters import apply_filters
from .review_models import (
    CATEGORY_KEYS,
    CHANNELS,
    AvailableFilters,
    CanonicalReview,
    DashboardView,
    DuplicateReviewError,
    FilterConfiguration,
    LeaderboardEntry,
    ListingPerformance,
    ReviewTotals,
)

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 4


def empty_category_map() -> Dict[str, Optional[float]]:
    return {key.value: None for key in CATEGORY_KEYS}


def empty_channel_mix() -> Dict[str, int]:
    return {channel.value: 0 for channel in CHANNELS}


def ensure_unique_ids(reviews: Sequence[CanonicalReview]) -> None:
    """
    Raises:
        DuplicateReviewError: two different reviews share an id
    """
    seen: Dict[str, CanonicalReview] = {}
    for review in reviews:
        previous = seen.setdefault(review.id, review)
        if previous is not review and previous != review:
            raise DuplicateReviewError(f"Review id {review.id} is shared by different reviews")


def category_averages(reviews: Iterable[CanonicalReview]) -> Dict[str, Optional[float]]:
    """
    Mean 5-point score per category, 1 decimal.

    Reviews lacking a category are ignored for it; a category no review
    carries is None.
    """
    reviews = list(reviews)
    result = empty_category_map()
    for key in CATEGORY_KEYS:
        scores = [
            score for score in (r.category_score(key) for r in reviews)
            if score is not None
        ]
        result[key.value] = round_to(average(scores), 1)
    return result


def category_health(reviews: Iterable[CanonicalReview]) -> Dict[str, Optional[float]]:
    """Category averages across the filtered/sorted review set."""
    return category_averages(reviews)


def channel_breakdown(reviews: Iterable[CanonicalReview]) -> Dict[str, int]:
    """Review count per channel; every channel present, zero-filled."""
    mix = empty_channel_mix()
    for review in reviews:
        mix[review.channel.value] += 1
    return mix


def build_leaderboard(
    labels_per_review: Iterable[Iterable[str]],
    limit: int = LEADERBOARD_SIZE,
) -> List[LeaderboardEntry]:
    """
    Tally labels and keep the most frequent ones.

    Counter keeps first-seen order and the sort is stable, so equal counts
    stay in the order in which labels were first tallied.
    """
    counts: Counter = Counter()
    for labels in labels_per_review:
        counts.update(labels)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [
        LeaderboardEntry(label=label, count=count)
        for label, count in ranked[:limit]
        if count > 0
    ]


def issue_leaderboard(reviews: Iterable[CanonicalReview], limit: int = LEADERBOARD_SIZE) -> List[LeaderboardEntry]:
    return build_leaderboard((r.issues for r in reviews), limit)


def tag_highlights(reviews: Iterable[CanonicalReview], limit: int = LEADERBOARD_SIZE) -> List[LeaderboardEntry]:
    return build_leaderboard((r.tags for r in reviews), limit)


def summarize_listings(reviews: Iterable[CanonicalReview]) -> List[ListingPerformance]:
    """
    Per-listing performance, in order of each listing's first appearance.

    Property name and location come from the listing's first review.
    """
    grouped: "OrderedDict[str, List[CanonicalReview]]" = OrderedDict()
    for review in reviews:
        grouped.setdefault(review.listing_id, []).append(review)

    summaries = []
    for listing_id, listing_reviews in grouped.items():
        ratings = [r.rating5 for r in listing_reviews if r.rating5 is not None]
        latest = max(listing_reviews, key=lambda r: r.submitted_time)
        first = listing_reviews[0]

        summaries.append(ListingPerformance(
            listing_id=listing_id,
            property_name=first.property_name,
            location=first.location,
            review_count=len(listing_reviews),
            avg_rating5=round_to(average(ratings), 1),
            last_review_date=latest.submitted_at,
            category_averages=category_averages(listing_reviews),
            channel_mix=channel_breakdown(listing_reviews),
        ))
    return summaries


def derive_totals(reviews: Iterable[CanonicalReview]) -> ReviewTotals:
    """Headline totals; the average is kept to 2 decimals."""
    reviews = list(reviews)
    ratings = [r.rating5 for r in reviews if r.rating5 is not None]
    return ReviewTotals(
        reviews=len(reviews),
        properties=len({r.listing_id for r in reviews}),
        avg_rating5=round_to(average(ratings), 2),
        channels=len({r.channel for r in reviews}),
    )


def derive_available_filters(reviews: Iterable[CanonicalReview]) -> AvailableFilters:
    """Channels present in the data (first-appearance order) plus the fixed choices."""
    channels = list(OrderedDict.fromkeys(r.channel for r in reviews))
    return AvailableFilters(channels=tuple(channels))


def approved_reviews(reviews: Iterable[CanonicalReview]) -> List[CanonicalReview]:
    return [r for r in reviews if r.is_approved]


class ReviewInsightAggregator:
    """
    Builds the complete dashboard view for one (reviews, filters) query.

    Stateless: every call recomputes from its inputs, so one instance can be
    shared between threads.
    """

    def __init__(self, leaderboard_size: int = LEADERBOARD_SIZE):
        if leaderboard_size <= 0:
            raise ValueError("leaderboard_size must be positive")
        self.leaderboard_size = leaderboard_size

    def build_dashboard(
        self,
        reviews: Sequence[CanonicalReview],
        filters: Optional[FilterConfiguration] = None,
        now: Optional[datetime] = None,
    ) -> DashboardView:
        """
        Filter, sort and aggregate.

        Leaderboards and totals describe the whole corpus; category health,
        channel breakdown and listing performance follow the active filters.

        Raises:
            DuplicateReviewError: two different reviews share an id
        """
        reviews = list(reviews)
        ensure_unique_ids(reviews)
        filters = filters or FilterConfiguration()

        visible = apply_filters(reviews, filters, now)

        view = DashboardView(
            filtered_reviews=visible,
            approved_reviews=approved_reviews(reviews),
            property_performance=summarize_listings(visible),
            channel_breakdown=channel_breakdown(visible),
            category_health=category_health(visible),
            issue_leaderboard=issue_leaderboard(reviews, self.leaderboard_size),
            tag_highlights=tag_highlights(reviews, self.leaderboard_size),
            totals=derive_totals(reviews),
        )

        logger.info(
            f"Dashboard built: {len(visible)}/{len(reviews)} reviews visible, "
            f"{len(view.property_performance)} listings"
        )
        return view


def build_dashboard(
    reviews: Sequence[CanonicalReview],
    filters: Optional[FilterConfiguration] = None,
    now: Optional[datetime] = None,
) -> DashboardView:
    """Module-level shortcut for ReviewInsightAggregator().build_dashboard()."""
    return ReviewInsightAggregator().build_dashboard(reviews, filters, now)
