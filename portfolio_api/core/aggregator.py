"""
Repository aggregator.

Filters the upstream repository listing against the allow-list and enriches
every survivor with its language breakdown, one concurrent call per repository.
"""

import asyncio
import logging
from typing import Mapping

from aiohttp import ClientError

from .exceptions import UpstreamError
from .github import GitHubClient
from .models import EnrichedResource

logger = logging.getLogger(__name__)


class RepositoryAggregator:
    """Request-scoped composition of the listing and enrichment calls."""

    def __init__(self, client: GitHubClient):
        self.client = client

    async def list_enriched_resources(
        self, allow_list: Mapping[str, str | None]
    ) -> list[EnrichedResource]:
        """
        List the allow-listed repositories with their languages.

        Args:
            allow_list: Repository name -> owner override (None for the default account)

        Returns:
            One EnrichedResource per allow-listed repository found upstream,
            in the upstream listing order

        Raises:
            ConfigurationError: If the upstream credential is missing
            RateLimited: If the upstream reports quota exhaustion
            UpstreamError: If the listing call fails for any other reason
        """
        self.client.check_credentials()
        try:
            listing = await self.client.list_repositories()
        except (ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error fetching repository listing: {e!r}")
            raise UpstreamError("Failed to fetch repositories from GitHub.") from e

        selected = [
            item
            for item in listing
            if isinstance(item, dict)
            and isinstance(item.get("name"), str)
            and item["name"] in allow_list
        ]
        results = await asyncio.gather(
            *(
                self.client.get_languages(
                    allow_list[item["name"]] or self.client.username, item["name"]
                )
                for item in selected
            ),
            return_exceptions=True,
        )

        resources = []
        for item, languages in zip(selected, results):
            if isinstance(languages, BaseException):
                logger.warning(f"Failed to fetch languages for {item['name']}: {languages}")
                languages = {}
            resources.append(EnrichedResource.from_listing(item, languages))
        return resources
