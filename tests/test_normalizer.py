"""
Tests for the review normalizer and the raw record contract.

Covers:
- camelCase record parsing (RawReview.from_dict)
- rating conversion and the synthetic overall category
- sparse category mappings
- keyword tags/issues and display labels
- duplicate id detection

Usage:
    pytest tests/test_normalizer.py -v
"""

import pytest

from staypulse.reviews.review_models import (
    CanonicalReview,
    CategoryKey,
    Channel,
    DuplicateReviewError,
    RawReview,
    ReviewContractError,
    ReviewType,
)
from staypulse.reviews.normalizer import (
    DEFAULT_GUEST_NAME,
    map_category_ratings,
    normalize_records,
    normalize_review,
    normalize_reviews,
)


# ============================================================================
# TEST DATA
# ============================================================================

def make_record(**overrides) -> dict:
    """Upstream JSON record with sensible defaults."""
    record = {
        "id": 7453,
        "listingId": "L1",
        "listingName": "Shoreditch Heights Loft",
        "listingLocation": "London",
        "channel": "airbnb",
        "type": "guest-to-host",
        "status": "published",
        "submittedAt": "2024-03-05T10:00:00Z",
        "stayLength": 3,
        "guestName": "Shane Finkelstein",
    }
    record.update(overrides)
    return record


def make_raw(**overrides) -> RawReview:
    return RawReview.from_dict(make_record(**overrides))


# ============================================================================
# RAW RECORD CONTRACT
# ============================================================================

class TestRawReviewFromDict:
    """Parsing upstream camelCase payloads."""

    def test_parses_fields(self):
        raw = make_raw(overallRating=9, categoryRatings={"cleanliness": 10}, isApproved=True)
        assert raw.id == 7453
        assert raw.listing_id == "L1"
        assert raw.channel == Channel.AIRBNB
        assert raw.review_type == ReviewType.GUEST_TO_HOST
        assert raw.overall_rating == 9
        assert raw.category_ratings == {"cleanliness": 10}
        assert raw.is_approved is True

    def test_numeric_listing_id_becomes_string(self):
        assert make_raw(listingId=101).listing_id == "101"

    def test_missing_required_field(self):
        record = make_record()
        del record["listingId"]
        with pytest.raises(ReviewContractError, match="listingId"):
            RawReview.from_dict(record)

    def test_unknown_channel(self):
        with pytest.raises(ReviewContractError):
            make_raw(channel="tripadvisor")

    def test_unknown_type(self):
        with pytest.raises(ReviewContractError):
            make_raw(type="host-to-host")

    def test_non_numeric_id(self):
        with pytest.raises(ReviewContractError):
            make_raw(id="abc")

    @pytest.mark.parametrize("field,value", [
        ("overallRating", "8"),
        ("rating", "nine"),
        ("rating", True),
        ("stayLength", "three"),
        ("stayLength", 2.5),
        ("stayLength", -1),
    ])
    def test_non_numeric_fields_rejected(self, field, value):
        """Numeric fields must be numbers; the error names the review and field."""
        with pytest.raises(ReviewContractError, match=f"Review 7453: '{field}'"):
            make_raw(**{field: value})

    def test_whole_float_stay_length_accepted(self):
        assert make_raw(stayLength=4.0).stay_length == 4

    def test_category_ratings_must_be_mapping(self):
        with pytest.raises(ReviewContractError, match="categoryRatings"):
            make_raw(categoryRatings=[10, 9])

    def test_non_numeric_category_score_rejected(self):
        with pytest.raises(ReviewContractError, match="categoryRatings.cleanliness"):
            make_raw(categoryRatings={"cleanliness": "ten"})

    def test_unknown_category_values_not_checked(self):
        review = normalize_review(make_raw(categoryRatings={"wifi": "great", "value": 8}))
        assert [c.key for c in review.categories] == [CategoryKey.VALUE]

    def test_record_must_be_mapping(self):
        with pytest.raises(ReviewContractError, match="must be an object"):
            RawReview.from_dict(["not", "a", "record"])

    def test_string_rating_fails_before_normalizing(self):
        with pytest.raises(ReviewContractError):
            normalize_records([make_record(overallRating="8")])

    def test_contract_error_is_value_error(self):
        assert issubclass(ReviewContractError, ValueError)
        assert issubclass(DuplicateReviewError, ReviewContractError)


# ============================================================================
# NORMALIZATION
# ============================================================================

class TestNormalizeReview:
    """normalize_review() on single records."""

    def test_scenario_rooftop_review(self):
        """overall 8 + cleanliness 10 + 'rooftop'/'noisy' text."""
        review = normalize_review(make_raw(
            overallRating=8,
            categoryRatings={"cleanliness": 10},
            publicReview="loved the rooftop but noisy street",
        ))

        assert isinstance(review, CanonicalReview)
        assert review.rating5 == 4.0
        assert review.rating10 == 8
        assert [(c.key, c.score5) for c in review.categories] == [
            (CategoryKey.CLEANLINESS, 5.0),
            (CategoryKey.OVERALL, 4.0),
        ]
        assert review.category_average5 == 4.5
        assert review.tags == ("Rooftop highlight",)
        assert review.issues == ("Noise complaint",)

    def test_rating_falls_back_to_rating(self):
        review = normalize_review(make_raw(rating=9))
        assert review.rating10 == 9
        assert review.rating5 == 4.5

    def test_overall_rating_wins_over_rating(self):
        review = normalize_review(make_raw(rating=6, overallRating=10))
        assert review.rating5 == 5.0

    def test_explicit_overall_not_duplicated(self):
        """An explicit overall score suppresses the synthetic one."""
        review = normalize_review(make_raw(overallRating=8, categoryRatings={"overall": 6}))
        overall = [c for c in review.categories if c.key == CategoryKey.OVERALL]
        assert len(overall) == 1
        assert overall[0].score10 == 6
        assert overall[0].score5 == 3.0
        assert review.rating5 == 4.0

    def test_no_rating_no_synthetic_overall(self):
        review = normalize_review(make_raw(categoryRatings={"value": 7}))
        assert review.rating5 is None
        assert review.rating10 is None
        assert not review.has_category(CategoryKey.OVERALL)
        assert review.category_average5 == 3.5

    def test_unrated_review(self):
        review = normalize_review(make_raw())
        assert review.rating5 is None
        assert review.categories == ()
        assert review.category_average5 is None

    def test_label_and_score_fields(self):
        review = normalize_review(make_raw(categoryRatings={"check_in": 9}))
        category = review.categories[0]
        assert category.label == "Check-in"
        assert category.score10 == 9
        assert category.score5 == 4.5

    def test_display_fields(self):
        review = normalize_review(make_raw())
        assert review.id == "7453"
        assert review.property_name == "Shoreditch Heights Loft"
        assert review.location == "London"
        assert review.submitted_at == "2024-03-05T10:00:00Z"
        assert review.submitted_date_label == "Mar 5, 2024"
        assert review.submitted_time.year == 2024
        assert review.stay_length == 3

    def test_default_guest_name(self):
        review = normalize_review(make_raw(guestName=None))
        assert review.guest_name == DEFAULT_GUEST_NAME

    def test_approval_defaults_false(self):
        assert normalize_review(make_raw()).is_approved is False
        assert normalize_review(make_raw(isApproved=None)).is_approved is False
        assert normalize_review(make_raw(isApproved=True)).is_approved is True

    def test_missing_text_has_no_signals(self):
        review = normalize_review(make_raw(publicReview=None))
        assert review.tags == ()
        assert review.issues == ()

    def test_invalid_timestamp(self):
        with pytest.raises(ReviewContractError):
            normalize_review(make_raw(submittedAt="05/03/2024"))

    def test_with_approval_returns_copy(self):
        review = normalize_review(make_raw())
        approved = review.with_approval(True)
        assert approved.is_approved is True
        assert review.is_approved is False
        assert approved.id == review.id


class TestMapCategoryRatings:
    """Sparse category mapping."""

    def test_null_scores_dropped(self):
        scores = map_category_ratings({"cleanliness": None, "value": 8})
        assert [s.key for s in scores] == [CategoryKey.VALUE]

    def test_unknown_keys_ignored(self):
        assert map_category_ratings({"wifi": 9}) == []

    def test_canonical_key_order(self):
        scores = map_category_ratings({"value": 8, "respect_house_rules": 10, "cleanliness": 10})
        assert [s.key for s in scores] == [
            CategoryKey.CLEANLINESS,
            CategoryKey.VALUE,
            CategoryKey.RESPECT_HOUSE_RULES,
        ]

    def test_zero_score_kept(self):
        scores = map_category_ratings({"accuracy": 0})
        assert scores[0].score5 == 0.0


class TestNormalizeCollections:

    def test_preserves_order(self):
        raws = [make_raw(id=3), make_raw(id=1), make_raw(id=2)]
        assert [r.id for r in normalize_reviews(raws)] == ["3", "1", "2"]

    def test_identical_repeats_pass(self):
        raw = make_raw()
        assert len(normalize_reviews([raw, raw])) == 2

    def test_conflicting_duplicate_ids(self):
        with pytest.raises(DuplicateReviewError):
            normalize_reviews([make_raw(listingId="L1"), make_raw(listingId="L2")])

    def test_normalize_records(self):
        reviews = normalize_records([make_record(id=1), make_record(id=2, channel="booking")])
        assert [r.channel for r in reviews] == [Channel.AIRBNB, Channel.BOOKING]

    def test_empty(self):
        assert normalize_reviews([]) == []
