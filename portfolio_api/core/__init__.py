"""
Core module for portfolio_api.

This module contains the caching and aggregation logic separated from the API layer.
It provides upstream access, the artifact freshness cache and the repository aggregator.
"""

from .aggregator import RepositoryAggregator
from .exceptions import (
    ApiException,
    ConfigurationError,
    PortfolioError,
    RateLimited,
    UpstreamError,
    UpstreamUnavailable,
    handle_exception,
)
from .freshness import FreshnessCache
from .github import GitHubClient
from .models import AllowListEntry, ArtifactMetadata, ArtifactResult, CachedRecord, EnrichedResource

__all__ = [
    "GitHubClient",
    "FreshnessCache",
    "RepositoryAggregator",
    "AllowListEntry",
    "ArtifactMetadata",
    "ArtifactResult",
    "CachedRecord",
    "EnrichedResource",
    "PortfolioError",
    "ConfigurationError",
    "RateLimited",
    "UpstreamError",
    "UpstreamUnavailable",
    "ApiException",
    "handle_exception",
]
