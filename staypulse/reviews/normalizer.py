"""
Review Normalizer
=================

Maps raw upstream review records onto the CanonicalReview entity used by
every derived view: rating-scale conversion, sparse category scores,
keyword tags/issues and display date labels.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from .ratings import average, round_to, to_five_point
from .review_models import (
    CATEGORY_KEYS,
    CATEGORY_LABELS,
    CanonicalReview,
    CategoryKey,
    CategoryScore,
    DuplicateReviewError,
    RawReview,
)
from .review_signals import detect_insights
from .review_time import format_date_label, parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_GUEST_NAME = "Guest"


def map_category_ratings(category_ratings: Mapping[str, Optional[float]]) -> List[CategoryScore]:
    """Category scores for every canonical key with a non-null raw value, in key order."""
    scores = []
    for key in CATEGORY_KEYS:
        score10 = category_ratings.get(key.value)
        if score10 is None:
            continue
        scores.append(CategoryScore(
            key=key,
            label=CATEGORY_LABELS[key],
            score10=score10,
            score5=to_five_point(score10),
        ))
    return scores


def normalize_review(raw: RawReview) -> CanonicalReview:
    """
    Convert one raw record into its canonical form.

    The authoritative rating is overall_rating, falling back to rating.
    When it exists and no explicit "overall" category was supplied, a
    synthetic overall category is appended.

    Raises:
        ReviewContractError: submitted_at is not ISO-8601
    """
    rating10 = raw.overall_rating if raw.overall_rating is not None else raw.rating
    rating5 = to_five_point(rating10)

    categories = map_category_ratings(raw.category_ratings or {})
    if rating10 is not None and not any(c.key == CategoryKey.OVERALL for c in categories):
        categories.append(CategoryScore(
            key=CategoryKey.OVERALL,
            label=CATEGORY_LABELS[CategoryKey.OVERALL],
            score10=rating10,
            score5=rating5,
        ))

    category_average5 = round_to(
        average(c.score5 for c in categories if c.score5 is not None),
        1,
    )

    tags, issues = detect_insights(raw.public_review)
    submitted_time = parse_timestamp(raw.submitted_at)

    return CanonicalReview(
        id=str(raw.id),
        listing_id=raw.listing_id,
        property_name=raw.listing_name,
        location=raw.listing_location,
        channel=raw.channel,
        review_type=raw.review_type,
        rating5=rating5,
        rating10=rating10,
        submitted_at=raw.submitted_at,
        submitted_time=submitted_time,
        submitted_date_label=format_date_label(submitted_time),
        guest_name=raw.guest_name or DEFAULT_GUEST_NAME,
        public_review=raw.public_review,
        private_note=raw.private_note,
        stay_length=raw.stay_length,
        categories=tuple(categories),
        category_average5=category_average5,
        tags=tuple(tags),
        issues=tuple(issues),
        is_approved=bool(raw.is_approved),
    )


def normalize_reviews(raws: Iterable[RawReview]) -> List[CanonicalReview]:
    """
    Normalize a collection, preserving order.

    Identical records repeated under the same id pass through; two different
    records sharing an id would corrupt per-review aggregates and are rejected.

    Raises:
        DuplicateReviewError: two different records share an id
    """
    seen: Dict[int, RawReview] = {}
    normalized = []
    for raw in raws:
        previous = seen.get(raw.id)
        if previous is not None and previous != raw:
            raise DuplicateReviewError(
                f"Review id {raw.id} is shared by different records "
                f"(listings {previous.listing_id} and {raw.listing_id})"
            )
        seen[raw.id] = raw
        normalized.append(normalize_review(raw))

    logger.info(f"Normalized {len(normalized)} reviews")
    return normalized


def normalize_records(records: Iterable[Mapping]) -> List[CanonicalReview]:
    """Parse upstream JSON records and normalize them."""
    return normalize_reviews(RawReview.from_dict(record) for record in records)
