"""
StayPulse Orchestrator CLI
==========================

Command-line interface for the review dashboard.

Commands:
    dashboard     - Build the dashboard views (from a JSON file or the service)
    approve       - Approve or reject one review for the public site
    bulk-approve  - Approve or reject several reviews
    health        - Check the upstream reviews service

Usage:
    python -m staypulse.orchestrator.cli dashboard --input reviews.json --channel airbnb
    python -m staypulse.orchestrator.cli dashboard --min-rating 4 --sort-by highest --json
    python -m staypulse.orchestrator.cli approve --review-id 7453
    python -m staypulse.orchestrator.cli bulk-approve --review-ids 7453 7454 --reject
    python -m staypulse.orchestrator.cli health
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from typing import List, Optional

from ..data.config import get_settings
from ..data.reviews_client import ReviewsApiClient, ReviewsApiError
from ..reviews.review_models import (
    ALL,
    CATEGORY_LABELS,
    CategoryKey,
    Channel,
    DashboardView,
    FilterConfiguration,
    RawReview,
    ReviewContractError,
    ReviewType,
    SortOrder,
    TimeRange,
)
from ..reviews.review_time import format_relative_time
from .dashboard_state import ReviewDashboard
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False):
    """Configure logging for CLI runs."""
    cfg = get_settings().logging
    level = "DEBUG" if verbose else cfg.level
    setup_logging(level=level, json_output=cfg.json_logs, log_file=cfg.log_file)


def load_input_file(path: str) -> List[RawReview]:
    """
    Read a JSON array of upstream review records.

    Raises:
        ReviewContractError: file is not a JSON array or a record is invalid
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ReviewContractError(f"{path} must contain a JSON array of reviews")
    return [RawReview.from_dict(record) for record in data]


def filters_from_args(args) -> FilterConfiguration:
    return FilterConfiguration(
        channel=args.channel,
        review_type=args.review_type,
        category=args.category,
        min_rating=args.min_rating,
        time_range=args.time_range,
        search_term=args.search or "",
        sort_by=args.sort_by,
        approved_only=args.approved_only,
    )


def _fmt(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:.1f}"


def print_summary(
    view: DashboardView,
    limit: int = 10,
    generated_at: Optional[str] = None,
    now: Optional[datetime] = None,
):
    totals = view.totals
    print("=" * 60)
    print("STAYPULSE REVIEW DASHBOARD")
    print("=" * 60)
    avg = "N/A" if totals.avg_rating5 is None else f"{totals.avg_rating5:.2f}"
    print(f"Reviews: {totals.reviews}  Properties: {totals.properties}  "
          f"Channels: {totals.channels}  Avg rating: {avg}/5")
    print(f"Visible after filters: {len(view.filtered_reviews)}")
    print(f"Generated: {format_relative_time(generated_at, now)}")
    print()

    print("Listings:")
    for listing in view.property_performance:
        print(f"  {listing.property_name} ({listing.location})")
        print(f"     {listing.review_count} reviews, avg {_fmt(listing.avg_rating5)}/5, "
              f"last review {format_relative_time(listing.last_review_date, now)}")
    print()

    print("Category health:")
    for key in CategoryKey:
        print(f"  {CATEGORY_LABELS[key]:<14} {_fmt(view.category_health[key.value])}")
    print()

    print("Channel breakdown:")
    for channel, count in view.channel_breakdown.items():
        print(f"  {channel:<10} {count}")
    print()

    if view.issue_leaderboard:
        print("Top issues:")
        for entry in view.issue_leaderboard:
            print(f"  {entry.label}: {entry.count}")
        print()
    if view.tag_highlights:
        print("Highlights:")
        for entry in view.tag_highlights:
            print(f"  {entry.label}: {entry.count}")
        print()

    print(f"Reviews (first {min(limit, len(view.filtered_reviews))}):")
    for review in view.filtered_reviews[:limit]:
        approved = "✓" if review.is_approved else " "
        print(f"  [{approved}] #{review.id} {review.submitted_date_label} "
              f"{review.channel.value} {_fmt(review.rating5)}/5 - {review.guest_name}")
        if review.issues:
            print(f"       Issues: {', '.join(review.issues)}")


def cmd_dashboard(args):
    """Build and print the dashboard views."""
    try:
        filters = filters_from_args(args)
    except ValueError as e:
        print(f"ERROR: Invalid filter: {e}")
        return 1

    try:
        if args.input:
            dashboard = ReviewDashboard()
            dashboard.load_raw_reviews(load_input_file(args.input))
        else:
            dashboard = ReviewDashboard(ReviewsApiClient.from_settings())
            if not dashboard.fetch_reviews():
                print(f"ERROR: Failed to load reviews: {dashboard.error}")
                return 1
        view = dashboard.view(filters)
    except (OSError, json.JSONDecodeError, ReviewContractError) as e:
        print(f"ERROR: Failed to load reviews: {e}")
        logger.error(f"Dashboard input rejected: {e}")
        return 1

    if args.json:
        payload = view.to_dict()
        payload["filters"] = filters.to_dict()
        payload["available_filters"] = dashboard.available_filters.to_dict()
        print(json.dumps(payload, indent=2, default=str))
    else:
        print_summary(view, limit=args.limit, generated_at=dashboard.last_generated_at)
    return 0


def _set_approval(review_ids: List[int], is_approved: bool) -> int:
    client = ReviewsApiClient.from_settings()
    action = "approved" if is_approved else "rejected"
    try:
        if len(review_ids) == 1:
            client.set_review_approval(review_ids[0], is_approved)
        else:
            client.bulk_set_review_approval(review_ids, is_approved)
    except ReviewsApiError as e:
        print(f"ERROR: Approval update failed: {e}")
        return 1

    ids = ", ".join(f"#{i}" for i in review_ids)
    print(f"Reviews {action}: {ids}")
    return 0


def cmd_approve(args):
    """Approve (or reject) a single review."""
    return _set_approval([args.review_id], not args.reject)


def cmd_bulk_approve(args):
    """Approve (or reject) several reviews."""
    if not args.review_ids:
        print("No review ids given, nothing to do.")
        return 0
    return _set_approval(list(args.review_ids), not args.reject)


def cmd_health(args):
    """Check the upstream reviews service."""
    client = ReviewsApiClient.from_settings()
    print("=" * 60)
    print("REVIEWS SERVICE HEALTH")
    print("=" * 60)
    print(f"Endpoint: {client.base_url}")
    try:
        status = client.health_check()
    except ReviewsApiError as e:
        print(f"  ✗ unreachable: {e}")
        return 1

    print(f"  ✓ {status.get('status', 'ok') if isinstance(status, dict) else 'ok'}")
    if args.json:
        print(json.dumps(status, indent=2, default=str))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="StayPulse review dashboard CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # dashboard
    dash = subparsers.add_parser("dashboard", help="Build the dashboard views")
    dash.add_argument("--input", help="JSON file with an array of upstream review records")
    dash.add_argument("--channel", default=ALL, choices=[ALL] + [c.value for c in Channel])
    dash.add_argument("--review-type", default=ALL, choices=[ALL] + [t.value for t in ReviewType])
    dash.add_argument("--category", default=ALL, choices=[ALL] + [k.value for k in CategoryKey])
    dash.add_argument("--min-rating", type=float, default=0.0, help="Minimum 5-point rating")
    dash.add_argument("--time-range", default=TimeRange.ALL.value, choices=[t.value for t in TimeRange])
    dash.add_argument("--search", default="", help="Case-insensitive text search")
    dash.add_argument("--sort-by", default=SortOrder.RECENT.value, choices=[s.value for s in SortOrder])
    dash.add_argument("--approved-only", action="store_true", help="Only approved reviews")
    dash.add_argument("--limit", type=int, default=10, help="Reviews listed in the text summary")
    dash.add_argument("--json", action="store_true", help="Print the full view as JSON")

    # approve
    approve = subparsers.add_parser("approve", help="Approve one review for the public site")
    approve.add_argument("--review-id", type=int, required=True)
    approve.add_argument("--reject", action="store_true", help="Remove approval instead")

    # bulk-approve
    bulk = subparsers.add_parser("bulk-approve", help="Approve several reviews")
    bulk.add_argument("--review-ids", type=int, nargs="*", default=[])
    bulk.add_argument("--reject", action="store_true", help="Remove approval instead")

    # health
    health = subparsers.add_parser("health", help="Check the reviews service")
    health.add_argument("--json", action="store_true", help="Print the raw health payload")

    return parser


COMMANDS = {
    "dashboard": cmd_dashboard,
    "approve": cmd_approve,
    "bulk-approve": cmd_bulk_approve,
    "health": cmd_health,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.verbose)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
