"""
Tests for the reviews service client.

Note: These tests mock the requests session to avoid network calls.
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

from staypulse.data.reviews_client import ReviewsApiClient, ReviewsApiError
from staypulse.reviews.review_models import Channel, ReviewContractError


def make_response(status_code: int = 200, payload=None, reason: str = "OK", json_error: bool = False):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    if json_error:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


def make_record(review_id: int = 1, **overrides) -> dict:
    record = {
        "id": review_id,
        "listingId": "L1",
        "listingName": "Canal View Flat",
        "listingLocation": "Amsterdam",
        "channel": "booking",
        "type": "guest-to-host",
        "submittedAt": "2024-04-01T09:00:00Z",
        "overallRating": 9,
    }
    record.update(overrides)
    return record


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    session.headers = {}
    return ReviewsApiClient("http://reviews.local/", timeout=5, session=session)


class TestClientInit:

    def test_trailing_slash_stripped(self, client):
        assert client.base_url == "http://reviews.local"

    def test_json_content_type(self, client, session):
        assert session.headers["Content-Type"] == "application/json"

    @patch.dict("os.environ", {"REVIEWS_API_BASE_URL": "http://svc:9000/", "REVIEWS_API_TIMEOUT": "3"})
    def test_from_settings(self):
        from staypulse.data.config import load_settings

        client = ReviewsApiClient.from_settings(load_settings())
        assert client.base_url == "http://svc:9000"
        assert client.timeout == 3.0


class TestFetching:

    def test_fetch_reviews(self, client, session):
        session.request.return_value = make_response(payload=[make_record(1), make_record(2)])

        reviews = client.fetch_reviews()

        assert [r.id for r in reviews] == [1, 2]
        assert reviews[0].channel == Channel.BOOKING
        session.request.assert_called_once_with(
            "GET", "http://reviews.local/api/reviews/hostaway",
            params=None, json=None, timeout=5,
        )

    def test_fetch_approved_with_listing(self, client, session):
        session.request.return_value = make_response(payload=[make_record(3, isApproved=True)])

        reviews = client.fetch_approved_reviews("L1")

        assert reviews[0].is_approved is True
        _, kwargs = session.request.call_args
        assert kwargs["params"] == {"listing_id": "L1"}

    def test_fetch_approved_without_listing(self, client, session):
        session.request.return_value = make_response(payload=[])
        assert client.fetch_approved_reviews() == []
        _, kwargs = session.request.call_args
        assert kwargs["params"] is None

    def test_non_list_payload(self, client, session):
        session.request.return_value = make_response(payload={"reviews": []})
        with pytest.raises(ReviewsApiError, match="Expected a list"):
            client.fetch_reviews()

    def test_invalid_record(self, client, session):
        session.request.return_value = make_response(payload=[make_record(channel="fax")])
        with pytest.raises(ReviewContractError):
            client.fetch_reviews()

    def test_requests_counted(self, client, session):
        session.request.return_value = make_response(payload=[])
        client.fetch_reviews()
        client.fetch_reviews()
        assert client.get_stats()["requests_made"] == 2


class TestApprovalCalls:

    def test_set_review_approval(self, client, session):
        session.request.return_value = make_response(payload={"success": True})

        result = client.set_review_approval(7, True)

        assert result == {"success": True}
        session.request.assert_called_once_with(
            "PATCH", "http://reviews.local/api/reviews/approve",
            params=None, json={"review_id": 7, "is_approved": True}, timeout=5,
        )

    def test_bulk_set_review_approval(self, client, session):
        session.request.return_value = make_response(payload={"updated": 2})

        client.bulk_set_review_approval([1, 2], False)

        _, kwargs = session.request.call_args
        assert kwargs["json"] == {"review_ids": [1, 2], "is_approved": False}

    def test_health_check(self, client, session):
        session.request.return_value = make_response(payload={"status": "ok"})
        assert client.health_check() == {"status": "ok"}


class TestErrors:
    """Error mapping."""

    def test_detail_message_used(self, client, session):
        session.request.return_value = make_response(404, {"detail": "Review not found"}, "Not Found")
        with pytest.raises(ReviewsApiError, match="Review not found") as exc_info:
            client.set_review_approval(99, True)
        assert exc_info.value.status_code == 404

    def test_status_fallback_message(self, client, session):
        session.request.return_value = make_response(500, reason="Internal Server Error", json_error=True)
        with pytest.raises(ReviewsApiError, match="HTTP 500 Internal Server Error"):
            client.fetch_reviews()

    def test_transport_error_wrapped(self, client, session):
        session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ReviewsApiError, match="refused") as exc_info:
            client.fetch_reviews()
        assert exc_info.value.status_code is None

    def test_invalid_json_body(self, client, session):
        session.request.return_value = make_response(200, json_error=True)
        with pytest.raises(ReviewsApiError, match="Invalid JSON"):
            client.health_check()
