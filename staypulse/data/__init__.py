"""
StayPulse Data Module
=====================

Configuration and the client for the upstream reviews service.

Quick Start:
    from staypulse.data import ReviewsApiClient

    client = ReviewsApiClient.from_settings()
    raw_reviews = client.fetch_reviews()
"""

from .config import get_settings, load_settings, Settings
from .reviews_client import ReviewsApiClient, ReviewsApiError
