"""
StayPulse REST API
==================

FastAPI application exposing the review dashboard.
"""
