"""
HTTP API

FastAPI application exposing the booking assistant.
"""

from fairway.api.app import create_app

__all__ = ["create_app"]
