"""
StayPulse Dashboard Controller
==============================

Owns the mutable dashboard state: the loaded review collection, the
approved subset shown on the public site, the active filters and the
loading/error flags. The review engine only ever sees immutable snapshots.

Every fetch is tagged with a generation number; a fetch superseded by a
newer one (force=True) has its result discarded instead of overwriting
fresher data.

Usage:
    from staypulse.orchestrator.dashboard_state import ReviewDashboard

    dashboard = ReviewDashboard(ReviewsApiClient.from_settings())
    dashboard.fetch_reviews()
    dashboard.set_filter("channel", "airbnb")
    view = dashboard.view()
"""

import logging
import threading
import time
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from ..data.reviews_client import ReviewsApiClient, ReviewsApiError
from ..reviews.normalizer import normalize_reviews
from ..reviews.review_insights import ReviewInsightAggregator, derive_available_filters
from ..reviews.review_models import (
    CanonicalReview,
    DashboardView,
    FilterConfiguration,
    RawReview,
    ReviewContractError,
)
from ..reviews.review_time import utc_now

logger = logging.getLogger(__name__)


class ReviewDashboard:
    """
    Single owner of the dashboard state.

    Updates are serialized by a lock; network calls run outside it.
    Upstream failures are recorded in ``error`` / ``public_error`` and
    logged rather than raised.
    """

    def __init__(
        self,
        client: Optional[ReviewsApiClient] = None,
        aggregator: Optional[ReviewInsightAggregator] = None,
    ):
        self.client = client
        self.aggregator = aggregator or ReviewInsightAggregator()
        self._lock = threading.Lock()

        self.reviews: Tuple[CanonicalReview, ...] = ()
        self.public_reviews: Tuple[CanonicalReview, ...] = ()
        self.filters = FilterConfiguration()
        self.available_filters = derive_available_filters(())
        self.loading = False
        self.public_loading = False
        self.error: Optional[str] = None
        self.public_error: Optional[str] = None
        self.last_generated_at: Optional[str] = None

        self._generation = 0
        self._public_generation = 0

    # =========================================================================
    # Loading
    # =========================================================================

    def _require_client(self) -> ReviewsApiClient:
        if self.client is None:
            raise RuntimeError("No reviews service client configured")
        return self.client

    def fetch_reviews(self, force: bool = False) -> bool:
        """
        Load the full review history.

        A call while another fetch is in flight is skipped unless force=True,
        in which case the older fetch's result will be discarded.

        Returns:
            True when new reviews were stored.
        """
        client = self._require_client()
        with self._lock:
            if self.loading and not force:
                logger.debug("Review fetch already in progress, skipping")
                return False
            self._generation += 1
            generation = self._generation
            self.loading = True
            self.error = None

        start = time.time()
        try:
            raws = client.fetch_reviews()
            normalized = normalize_reviews(raws)
        except (ReviewsApiError, ReviewContractError) as e:
            self._fail_fetch(generation, str(e) or "Unable to load reviews")
            logger.error(f"Review fetch failed: {e}")
            return False
        except Exception as e:
            self._fail_fetch(generation, f"Unexpected error loading reviews: {e}")
            logger.exception(f"Review fetch failed unexpectedly: {e}")
            return False

        with self._lock:
            if generation != self._generation:
                logger.info("Discarding stale review fetch result")
                return False
            self._store_reviews(normalized)
            self.loading = False

        logger.info(
            f"Loaded {len(normalized)} reviews",
            extra={"stage": "fetch_reviews", "duration": round(time.time() - start, 3),
                   "count": len(normalized)},
        )
        self.fetch_approved_reviews()
        return True

    def fetch_approved_reviews(self, listing_id: Optional[str] = None, force: bool = False) -> bool:
        """Load the approved (public-site) subset, optionally for one listing."""
        client = self._require_client()
        with self._lock:
            if self.public_loading and not force:
                logger.debug("Approved review fetch already in progress, skipping")
                return False
            self._public_generation += 1
            generation = self._public_generation
            self.public_loading = True
            self.public_error = None

        try:
            normalized = normalize_reviews(client.fetch_approved_reviews(listing_id))
        except (ReviewsApiError, ReviewContractError) as e:
            self._fail_public_fetch(generation, str(e) or "Unable to load approved reviews")
            logger.error(f"Approved review fetch failed: {e}", extra={"listing_id": listing_id})
            return False
        except Exception as e:
            self._fail_public_fetch(generation, f"Unexpected error loading approved reviews: {e}")
            logger.exception(f"Approved review fetch failed unexpectedly: {e}")
            return False

        with self._lock:
            if generation != self._public_generation:
                logger.info("Discarding stale approved review fetch result")
                return False
            self.public_reviews = tuple(normalized)
            self.public_loading = False
        return True

    def _fail_fetch(self, generation: int, message: str) -> None:
        with self._lock:
            if generation == self._generation:
                self.loading = False
                self.error = message

    def _fail_public_fetch(self, generation: int, message: str) -> None:
        with self._lock:
            if generation == self._public_generation:
                self.public_loading = False
                self.public_error = message

    def ensure_loaded(self) -> bool:
        """Fetch once if nothing has been loaded yet. Returns True when data is available."""
        if self.last_generated_at is None and self.client is not None:
            self.fetch_reviews()
        return self.last_generated_at is not None

    def load_raw_reviews(self, raws: Iterable[RawReview]) -> None:
        """Replace the review collection with locally supplied records (no network)."""
        normalized = normalize_reviews(raws)
        with self._lock:
            self._generation += 1
            self._store_reviews(normalized)
            self.loading = False
            self.error = None

    def _store_reviews(self, normalized: Sequence[CanonicalReview]) -> None:
        self.reviews = tuple(normalized)
        self.available_filters = derive_available_filters(self.reviews)
        self.last_generated_at = utc_now().isoformat()

    # =========================================================================
    # Filters
    # =========================================================================

    def set_filter(self, name: str, value: Any) -> FilterConfiguration:
        """
        Update one filter.

        Raises:
            ValueError: unknown filter name or invalid value
        """
        with self._lock:
            self.filters = self.filters.with_value(name, value)
            return self.filters

    def reset_filters(self) -> FilterConfiguration:
        with self._lock:
            self.filters = FilterConfiguration()
            return self.filters

    # =========================================================================
    # Approval
    # =========================================================================

    def find_review(self, review_id: str) -> Optional[CanonicalReview]:
        return next((r for r in self.reviews if r.id == str(review_id)), None)

    def toggle_approval(self, review_id: str) -> bool:
        """
        Flip one review's approval flag upstream, then mirror it locally.

        Returns:
            True when the change was applied; False for an unknown id or an
            upstream failure (recorded in ``error``).
        """
        target = self.find_review(review_id)
        if target is None:
            logger.warning(f"Cannot toggle approval: unknown review {review_id}")
            return False
        next_state = not target.is_approved

        try:
            self._require_client().set_review_approval(int(target.id), next_state)
        except ReviewsApiError as e:
            with self._lock:
                self.error = str(e) or "Unable to update approval status"
            logger.error(f"Approval update failed for {review_id}: {e}", extra={"review_id": review_id})
            return False

        self._apply_approval({target.id}, next_state)
        self.fetch_approved_reviews()
        return True

    def bulk_toggle_approval(self, review_ids: Sequence[str], is_approved: bool) -> bool:
        """
        Set the approval flag on several reviews. An empty list is a no-op.

        Raises:
            ValueError: an id is not numeric (nothing is sent upstream)
        """
        if not review_ids:
            return False
        ids = [str(i) for i in review_ids]
        numeric_ids = []
        for review_id in ids:
            try:
                numeric_ids.append(int(review_id))
            except ValueError:
                raise ValueError(f"Review id must be numeric, got: {review_id!r}")

        try:
            self._require_client().bulk_set_review_approval(numeric_ids, is_approved)
        except ReviewsApiError as e:
            with self._lock:
                self.error = str(e) or "Unable to update approvals"
            logger.error(f"Bulk approval update failed: {e}")
            return False

        self._apply_approval(set(ids), is_approved)
        self.fetch_approved_reviews()
        return True

    def _apply_approval(self, review_ids: set, is_approved: bool) -> None:
        with self._lock:
            self.reviews = tuple(
                r.with_approval(is_approved) if r.id in review_ids else r
                for r in self.reviews
            )

    # =========================================================================
    # Derived views
    # =========================================================================

    def view(
        self,
        filters: Optional[FilterConfiguration] = None,
        now: Optional[datetime] = None,
    ) -> DashboardView:
        """Dashboard views for the current snapshot (active filters by default)."""
        with self._lock:
            reviews = self.reviews
            filters = filters or self.filters
        return self.aggregator.build_dashboard(reviews, filters, now)

    def approved_for_listing(self, listing_id: Optional[str] = None) -> List[CanonicalReview]:
        reviews = self.public_reviews
        if listing_id:
            return [r for r in reviews if r.listing_id == listing_id]
        return list(reviews)
