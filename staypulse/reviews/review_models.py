"""
Review Data Models
==================

Raw and canonical review entities plus the derived views computed by the
insight aggregator. Enumerations are ``str`` enums so members compare equal
to the strings used on the wire.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


class ReviewContractError(ValueError):
    """Input violates the caller contract (missing id, bad timestamp, unknown enum)."""
    pass


class DuplicateReviewError(ReviewContractError):
    """Two different records share the same review identifier."""
    pass


class Channel(str, Enum):
    """Booking platform a review originated from."""
    AIRBNB = "airbnb"
    BOOKING = "booking"
    DIRECT = "direct"
    VRBO = "vrbo"
    GOOGLE = "google"


class ReviewType(str, Enum):
    HOST_TO_GUEST = "host-to-guest"
    GUEST_TO_HOST = "guest-to-host"


class CategoryKey(str, Enum):
    """Guest-experience dimensions, in display order."""
    CLEANLINESS = "cleanliness"
    COMMUNICATION = "communication"
    CHECK_IN = "check_in"
    ACCURACY = "accuracy"
    VALUE = "value"
    LOCATION = "location"
    RESPECT_HOUSE_RULES = "respect_house_rules"
    OVERALL = "overall"


class TimeRange(str, Enum):
    ALL = "all"
    LAST_30_DAYS = "30d"
    LAST_60_DAYS = "60d"
    LAST_90_DAYS = "90d"


class SortOrder(str, Enum):
    RECENT = "recent"
    OLDEST = "oldest"
    HIGHEST = "highest"
    LOWEST = "lowest"


ALL = "all"

CATEGORY_LABELS: Dict[CategoryKey, str] = {
    CategoryKey.CLEANLINESS: "Cleanliness",
    CategoryKey.COMMUNICATION: "Communication",
    CategoryKey.CHECK_IN: "Check-in",
    CategoryKey.ACCURACY: "Accuracy",
    CategoryKey.VALUE: "Value",
    CategoryKey.LOCATION: "Location",
    CategoryKey.RESPECT_HOUSE_RULES: "House Rules",
    CategoryKey.OVERALL: "Overall",
}

CATEGORY_KEYS: Tuple[CategoryKey, ...] = tuple(CategoryKey)
CHANNELS: Tuple[Channel, ...] = tuple(Channel)
REVIEW_TYPES: Tuple[ReviewType, ...] = tuple(ReviewType)

TIME_RANGE_DAYS: Dict[TimeRange, int] = {
    TimeRange.LAST_30_DAYS: 30,
    TimeRange.LAST_60_DAYS: 60,
    TimeRange.LAST_90_DAYS: 90,
}


def _coerce_enum(enum_cls, value, field_name: str, allow_all: bool = False):
    if allow_all and value == ALL:
        return ALL
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(f"Invalid {field_name}: {value!r}")


def _require(data: Mapping[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None:
        raise ReviewContractError(f"Review record is missing required field '{key}'")
    return value


def _optional_number(value: Any, field_name: str, review_id: int) -> Optional[float]:
    """None stays None; anything but an int or float (bools included) is rejected."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ReviewContractError(
            f"Review {review_id}: '{field_name}' must be a number, got: {value!r}"
        )
    return value


def _stay_length(value: Any, review_id: int) -> int:
    number = _optional_number(value, "stayLength", review_id)
    if number is None:
        return 0
    if number < 0 or number != int(number):
        raise ReviewContractError(
            f"Review {review_id}: 'stayLength' must be a whole number of nights, got: {value!r}"
        )
    return int(number)


def _category_ratings(value: Any, review_id: int) -> Dict[str, Optional[float]]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ReviewContractError(
            f"Review {review_id}: 'categoryRatings' must be an object, got: {type(value).__name__}"
        )
    known = {key.value for key in CategoryKey}
    # unknown keys are ignored downstream, so only known scores are checked
    return {
        str(key): _optional_number(score, f"categoryRatings.{key}", review_id) if key in known else score
        for key, score in value.items()
    }


@dataclass(frozen=True)
class RawReview:
    """One record as delivered by the upstream reviews service."""
    id: int
    listing_id: str
    listing_name: str
    listing_location: str
    channel: Channel
    review_type: ReviewType
    submitted_at: str
    stay_length: int = 0
    rating: Optional[float] = None
    overall_rating: Optional[float] = None
    # key absent = category not rated, key present with None = rated but empty
    category_ratings: Mapping[str, Optional[float]] = field(default_factory=dict)
    public_review: Optional[str] = None
    private_note: Optional[str] = None
    guest_name: Optional[str] = None
    status: Optional[str] = None
    is_approved: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawReview":
        """
        Build a RawReview from the service's camelCase JSON payload.

        Raises:
            ReviewContractError: record is not a mapping, required fields are
                missing, enum values are unknown or numeric fields are not numbers
        """
        if not isinstance(data, Mapping):
            raise ReviewContractError(
                f"Review record must be an object, got: {type(data).__name__}"
            )
        raw_id = _require(data, "id")
        try:
            review_id = int(raw_id)
        except (TypeError, ValueError):
            raise ReviewContractError(f"Review id must be numeric, got: {raw_id!r}")

        try:
            channel = Channel(_require(data, "channel"))
            review_type = ReviewType(_require(data, "type"))
        except ValueError as e:
            if isinstance(e, ReviewContractError):
                raise
            raise ReviewContractError(f"Review {review_id}: {e}")

        return cls(
            id=review_id,
            listing_id=str(_require(data, "listingId")),
            listing_name=data.get("listingName") or "",
            listing_location=data.get("listingLocation") or "",
            channel=channel,
            review_type=review_type,
            submitted_at=_require(data, "submittedAt"),
            stay_length=_stay_length(data.get("stayLength"), review_id),
            rating=_optional_number(data.get("rating"), "rating", review_id),
            overall_rating=_optional_number(data.get("overallRating"), "overallRating", review_id),
            category_ratings=_category_ratings(data.get("categoryRatings"), review_id),
            public_review=data.get("publicReview"),
            private_note=data.get("privateNote"),
            guest_name=data.get("guestName"),
            status=data.get("status"),
            is_approved=data.get("isApproved"),
        )


@dataclass(frozen=True)
class CategoryScore:
    key: CategoryKey
    label: str
    score10: float
    score5: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key.value,
            "label": self.label,
            "score10": self.score10,
            "score5": self.score5,
        }


@dataclass(frozen=True)
class CanonicalReview:
    """Normalized review consumed by every derived view."""
    id: str
    listing_id: str
    property_name: str
    location: str
    channel: Channel
    review_type: ReviewType
    rating5: Optional[float]
    rating10: Optional[float]
    submitted_at: str
    submitted_time: datetime
    submitted_date_label: str
    guest_name: str
    public_review: Optional[str]
    private_note: Optional[str]
    stay_length: int
    categories: Tuple[CategoryScore, ...]
    category_average5: Optional[float]
    tags: Tuple[str, ...]
    issues: Tuple[str, ...]
    is_approved: bool = False

    def category_score(self, key: Union[CategoryKey, str]) -> Optional[float]:
        """5-point score for a category, None when the review lacks it."""
        for category in self.categories:
            if category.key == key:
                return category.score5
        return None

    def has_category(self, key: Union[CategoryKey, str]) -> bool:
        return any(category.key == key for category in self.categories)

    def with_approval(self, is_approved: bool) -> "CanonicalReview":
        return replace(self, is_approved=bool(is_approved))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "listing_id": self.listing_id,
            "property_name": self.property_name,
            "location": self.location,
            "channel": self.channel.value,
            "review_type": self.review_type.value,
            "rating5": self.rating5,
            "rating10": self.rating10,
            "submitted_at": self.submitted_at,
            "submitted_date_label": self.submitted_date_label,
            "guest_name": self.guest_name,
            "public_review": self.public_review,
            "private_note": self.private_note,
            "stay_length": self.stay_length,
            "categories": [c.to_dict() for c in self.categories],
            "category_average5": self.category_average5,
            "tags": list(self.tags),
            "issues": list(self.issues),
            "is_approved": self.is_approved,
        }


@dataclass(frozen=True)
class FilterConfiguration:
    """
    User-adjustable filter and sort settings.

    "all", 0, "" and False disable the corresponding predicate.
    String values are coerced to their enums; unknown values raise ValueError.
    """
    channel: Union[Channel, str] = ALL
    review_type: Union[ReviewType, str] = ALL
    category: Union[CategoryKey, str] = ALL
    min_rating: float = 0.0
    time_range: TimeRange = TimeRange.ALL
    search_term: str = ""
    sort_by: SortOrder = SortOrder.RECENT
    approved_only: bool = False

    def __post_init__(self):
        object.__setattr__(self, "channel", _coerce_enum(Channel, self.channel, "channel", allow_all=True))
        object.__setattr__(self, "review_type", _coerce_enum(ReviewType, self.review_type, "review_type", allow_all=True))
        object.__setattr__(self, "category", _coerce_enum(CategoryKey, self.category, "category", allow_all=True))
        object.__setattr__(self, "time_range", _coerce_enum(TimeRange, self.time_range, "time_range"))
        object.__setattr__(self, "sort_by", _coerce_enum(SortOrder, self.sort_by, "sort_by"))
        try:
            min_rating = float(self.min_rating or 0)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid min_rating: {self.min_rating!r}")
        if not 0 <= min_rating <= 5:
            raise ValueError(f"min_rating must be between 0 and 5, got: {min_rating}")
        object.__setattr__(self, "min_rating", min_rating)
        object.__setattr__(self, "search_term", self.search_term or "")
        object.__setattr__(self, "approved_only", bool(self.approved_only))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FilterConfiguration":
        """Build from a mapping, ignoring None values and unknown keys."""
        known = cls.__dataclass_fields__
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    def with_value(self, name: str, value: Any) -> "FilterConfiguration":
        if name not in self.__dataclass_fields__:
            raise ValueError(f"Unknown filter: {name}")
        return replace(self, **{name: value})

    def to_dict(self) -> Dict[str, Any]:
        def _plain(value):
            return value.value if isinstance(value, Enum) else value

        return {name: _plain(getattr(self, name)) for name in self.__dataclass_fields__}


@dataclass(frozen=True)
class LeaderboardEntry:
    label: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "count": self.count}


@dataclass(frozen=True)
class ListingPerformance:
    """Per-listing summary over the filtered review set."""
    listing_id: str
    property_name: str
    location: str
    review_count: int
    avg_rating5: Optional[float]
    last_review_date: str
    category_averages: Dict[str, Optional[float]]
    channel_mix: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "listing_id": self.listing_id,
            "property_name": self.property_name,
            "location": self.location,
            "review_count": self.review_count,
            "avg_rating5": self.avg_rating5,
            "last_review_date": self.last_review_date,
            "category_averages": dict(self.category_averages),
            "channel_mix": dict(self.channel_mix),
        }


@dataclass(frozen=True)
class ReviewTotals:
    reviews: int
    properties: int
    avg_rating5: Optional[float]
    channels: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reviews": self.reviews,
            "properties": self.properties,
            "avg_rating5": self.avg_rating5,
            "channels": self.channels,
        }


@dataclass(frozen=True)
class AvailableFilters:
    """Filter choices offered to the user for the loaded review set."""
    channels: Tuple[Channel, ...]
    categories: Tuple[CategoryKey, ...] = CATEGORY_KEYS
    review_types: Tuple[ReviewType, ...] = REVIEW_TYPES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "channels": [c.value for c in self.channels],
            "categories": [c.value for c in self.categories],
            "review_types": [t.value for t in self.review_types],
        }


@dataclass(frozen=True)
class DashboardView:
    """Every derived view for one (reviews, filters) query."""
    filtered_reviews: List[CanonicalReview]
    approved_reviews: List[CanonicalReview]
    property_performance: List[ListingPerformance]
    channel_breakdown: Dict[str, int]
    category_health: Dict[str, Optional[float]]
    issue_leaderboard: List[LeaderboardEntry]
    tag_highlights: List[LeaderboardEntry]
    totals: ReviewTotals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filtered_reviews": [r.to_dict() for r in self.filtered_reviews],
            "approved_reviews": [r.to_dict() for r in self.approved_reviews],
            "property_performance": [p.to_dict() for p in self.property_performance],
            "channel_breakdown": dict(self.channel_breakdown),
            "category_health": dict(self.category_health),
            "issue_leaderboard": [e.to_dict() for e in self.issue_leaderboard],
            "tag_highlights": [e.to_dict() for e in self.tag_highlights],
            "totals": self.totals.to_dict(),
        }
