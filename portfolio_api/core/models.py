"""
Data models for the core module.

This module contains data classes and models used throughout the application.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ArtifactMetadata:
    """Represents metadata for the externally hosted artifact."""

    url: str
    etag: str | None = None
    last_modified: str | None = None
    sha: str | None = None
    size: int | None = None
    download_url: str | None = None
    timestamp: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "lastModified": self.last_modified,
            "etag": self.etag,
            "sha": self.sha,
            "size": self.size,
            "downloadUrl": self.download_url,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class CachedRecord:
    """The single cached artifact record, replaced wholesale on every update."""

    data: ArtifactMetadata
    stored_at: float
    entity_tag: str | None = None


@dataclass(frozen=True)
class ArtifactResult:
    """Outcome of an artifact metadata lookup: fresh, not modified or stale."""

    data: ArtifactMetadata | None = None
    cached: bool = False
    cache_age: int = 0
    updated: bool = False
    not_modified: bool = False
    stale: bool = False
    error: str | None = None

    @property
    def fresh(self) -> bool:
        return not (self.stale or self.not_modified)

    def to_dict(self) -> dict[str, Any]:
        if self.not_modified:
            return {"notModified": True}
        if self.stale:
            return {
                "stale": True,
                "cached": True,
                "data": self.data.to_dict(),
                "error": self.error,
            }
        return {
            "fresh": True,
            "data": self.data.to_dict(),
            "cached": self.cached,
            "cacheAge": self.cache_age,
            "updated": self.updated,
        }


@dataclass
class EnrichedResource:
    """A repository from the upstream listing with its language breakdown."""

    name: str
    owner: str | None = None
    description: str | None = None
    url: str | None = None
    language: str | None = None
    updated_at: str | None = None
    enrichment: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_listing(cls, item: dict, enrichment: dict[str, int]) -> "EnrichedResource":
        owner = item.get("owner")
        # the listing nests the owner as an account object
        if isinstance(owner, dict):
            owner = owner.get("login")
        return cls(
            name=item["name"],
            owner=owner,
            description=item.get("description"),
            url=item.get("html_url") or item.get("url"),
            language=item.get("language"),
            updated_at=item.get("updated_at"),
            enrichment=enrichment,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "owner": self.owner,
            "description": self.description,
            "url": self.url,
            "language": self.language,
            "updated_at": self.updated_at,
            "languages": self.enrichment,
        }


@dataclass(frozen=True)
class AllowListEntry:
    """Display configuration of a curated repository."""

    name: str
    section: str
    order: int
    owner: str | None = None
    title: str | None = None
    description: str | None = None
    libraries: tuple[str, ...] = ()
    in_progress: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "section": self.section,
            "order": self.order,
            "owner": self.owner,
            "title": self.title,
            "description": self.description,
            "libraries": list(self.libraries),
            "inProgress": self.in_progress,
        }
