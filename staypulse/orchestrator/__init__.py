"""
StayPulse Orchestrator
======================

Stateful layer around the review engine: the dashboard controller,
logging setup and the command-line interface.
"""

from .dashboard_state import ReviewDashboard
from .logging_config import setup_logging, JSONFormatter
