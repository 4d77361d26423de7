"""
StayPulse
=========

Guest-review analytics for short-stay property portfolios.

Subpackages:
    reviews: normalization and derived-metrics engine
    data: configuration and the upstream reviews service client
    orchestrator: dashboard controller, logging and CLI
    api: REST API exposing the dashboard views
"""

__version__ = "0.1.0"
