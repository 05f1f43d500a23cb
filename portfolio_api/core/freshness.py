"""
Freshness cache for the externally hosted artifact.

Holds at most one `CachedRecord`. Requests inside the TTL are served from
memory, misses are revalidated against the upstream entity tag, and upstream
failures fall back to the last good record marked as stale.
"""

import asyncio
import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable

from aiohttp import ClientError

from .. import config
from .exceptions import UpstreamError, UpstreamUnavailable
from .github import GitHubClient
from .models import ArtifactMetadata, ArtifactResult, CachedRecord

logger = logging.getLogger(__name__)


class FreshnessCache:
    """Process-lifetime cache of the artifact metadata, empty at creation."""

    def __init__(
        self,
        client: GitHubClient,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.ttl = config.ARTIFACT_CACHE_TTL if ttl is None else ttl
        self.clock = clock
        self.record: CachedRecord | None = None
        # serialises revalidations so concurrent misses hit upstream once
        self._lock = asyncio.Lock()

    def _from_cache(self) -> ArtifactResult | None:
        record = self.record
        if record is None:
            return None
        age = self.clock() - record.stored_at
        if age >= self.ttl:
            return None
        return ArtifactResult(data=record.data, cached=True, cache_age=int(age))

    async def get_artifact_metadata(
        self, if_modified_since: str | None = None, if_none_match: str | None = None
    ) -> ArtifactResult:
        """
        Get the artifact metadata, from memory when fresh enough.

        Raises:
            ConfigurationError: If the upstream credential is missing
            UpstreamUnavailable: If the upstream fails and nothing is cached
        """
        self.client.check_credentials()
        result = self._from_cache()
        if result:
            return result
        async with self._lock:
            # a concurrent request may have refreshed the record while we waited
            result = self._from_cache()
            if result:
                return result
            try:
                return await self._revalidate(if_modified_since, if_none_match)
            except (UpstreamError, ClientError, asyncio.TimeoutError) as e:
                return self._fallback(e)

    async def _revalidate(
        self, if_modified_since: str | None, if_none_match: str | None
    ) -> ArtifactResult:
        status, metadata, etag = await self.client.get_artifact_metadata(
            if_modified_since, if_none_match
        )
        if status == 304:
            return ArtifactResult(not_modified=True)

        record = self.record
        if record is not None and etag is not None and record.entity_tag == etag:
            self.record = replace(record, stored_at=self.clock())
            return ArtifactResult(data=record.data, cached=True, cache_age=0)

        # make sure the artifact itself is reachable before advertising it
        content = await self.client.fetch_artifact_body()
        committer = (metadata.get("commit") or {}).get("committer") or {}
        size = metadata.get("size")
        data = ArtifactMetadata(
            url=config.ARTIFACT_URL,
            etag=etag,
            last_modified=committer.get("date"),
            sha=metadata.get("sha"),
            size=len(content) if size is None else size,
            download_url=metadata.get("download_url"),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self.record = CachedRecord(data=data, stored_at=self.clock(), entity_tag=etag)
        logger.info(f"Artifact metadata updated (etag {etag})")
        return ArtifactResult(data=data, updated=True)

    def _fallback(self, error: Exception) -> ArtifactResult:
        description = str(error) or type(error).__name__
        record = self.record
        if record is None:
            logger.error(f"Error fetching artifact data, nothing cached: {description}")
            raise UpstreamUnavailable("Failed to fetch artifact data") from error
        logger.warning(f"Serving stale artifact data: {description}")
        return ArtifactResult(
            data=record.data,
            stale=True,
            error=f"Using cached data due to fetch error: {description}",
        )

    def expire(self) -> None:
        """Force the next lookup to revalidate, keeping the record for stale fallback."""
        record = self.record
        if record is None:
            return
        self.record = replace(record, stored_at=record.stored_at - self.ttl)
