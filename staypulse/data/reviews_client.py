"""
Reviews Service Client
======================

HTTP client for the upstream reviews service that owns the review history
and the public-site approval flags.

Endpoints:
    GET   /api/reviews/hostaway       - full review history
    GET   /api/reviews/approved       - approved subset (optional listing_id)
    PATCH /api/reviews/approve        - set one approval flag
    PATCH /api/reviews/approve/bulk   - set many approval flags
    GET   /health                     - service health

Configuration:
    REVIEWS_API_BASE_URL, REVIEWS_API_TIMEOUT (see config.py)
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..reviews.review_models import RawReview

logger = logging.getLogger(__name__)


class ReviewsApiError(Exception):
    """Upstream reviews service error (HTTP status or transport failure)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ReviewsApiClient:
    """
    Thin JSON client over requests.

    Non-2xx responses raise ReviewsApiError carrying the service's
    "detail" message when it sends one.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self._requests_made = 0

    @classmethod
    def from_settings(cls, settings=None) -> "ReviewsApiClient":
        from .config import get_settings

        settings = settings or get_settings()
        return cls(
            base_url=settings.reviews_api.base_url,
            timeout=settings.reviews_api.timeout,
        )

    def _resolve(self, endpoint: str) -> str:
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        return f"{self.base_url}{endpoint}"

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = self._resolve(endpoint)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ReviewsApiError(f"Request to {endpoint} failed: {e}")
        self._requests_made += 1

        if not response.ok:
            raise ReviewsApiError(_error_message(response), status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            raise ReviewsApiError(
                f"Invalid JSON from {endpoint}", status_code=response.status_code
            )

    def fetch_reviews(self) -> List[RawReview]:
        """Full review history as raw records."""
        data = self._request("GET", "/api/reviews/hostaway")
        reviews = [RawReview.from_dict(item) for item in _as_list(data, "/api/reviews/hostaway")]
        logger.info(f"Fetched {len(reviews)} reviews")
        return reviews

    def fetch_approved_reviews(self, listing_id: Optional[str] = None) -> List[RawReview]:
        """Reviews approved for the public site, optionally for one listing."""
        params = {"listing_id": listing_id} if listing_id else None
        data = self._request("GET", "/api/reviews/approved", params=params)
        reviews = [RawReview.from_dict(item) for item in _as_list(data, "/api/reviews/approved")]
        logger.info(
            f"Fetched {len(reviews)} approved reviews"
            + (f" for listing {listing_id}" if listing_id else "")
        )
        return reviews

    def set_review_approval(self, review_id: int, is_approved: bool) -> Dict[str, Any]:
        """Set one review's approval flag. Returns the service acknowledgement."""
        result = self._request(
            "PATCH",
            "/api/reviews/approve",
            payload={"review_id": int(review_id), "is_approved": bool(is_approved)},
        )
        logger.info(
            f"Review {review_id} approval set to {is_approved}",
            extra={"review_id": review_id},
        )
        return result

    def bulk_set_review_approval(self, review_ids: Sequence[int], is_approved: bool) -> Dict[str, Any]:
        """Set the approval flag on several reviews at once."""
        result = self._request(
            "PATCH",
            "/api/reviews/approve/bulk",
            payload={"review_ids": [int(i) for i in review_ids], "is_approved": bool(is_approved)},
        )
        logger.info(f"Approval set to {is_approved} for {len(review_ids)} reviews")
        return result

    def health_check(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    def get_stats(self) -> Dict[str, Any]:
        return {"requests_made": self._requests_made, "base_url": self.base_url}


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return f"HTTP {response.status_code} {response.reason}"


def _as_list(data: Any, endpoint: str) -> List[Dict[str, Any]]:
    if not isinstance(data, list):
        raise ReviewsApiError(f"Expected a list from {endpoint}, got {type(data).__name__}")
    return data
