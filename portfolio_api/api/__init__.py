"""
API module for portfolio_api.

This module contains the API layer that handles HTTP requests and responses.
It uses the core module for caching and aggregation and provides REST endpoints.
"""

from .app import app_factory

__all__ = ["app_factory"]
