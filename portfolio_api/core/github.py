"""
Upstream access layer for the core module.

Thin wrapper around the GitHub REST API shared by the aggregator and the
freshness cache: request headers, error-body parsing and rate limit detection.
"""

import logging
from typing import Any, Mapping
from urllib.parse import quote

from aiohttp import ClientResponse, ClientSession

from .. import config
from .exceptions import ConfigurationError, RateLimited, UpstreamError

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "rate limit exceeded"


def error_message(body: Any) -> str | None:
    """Extract the `message` field of an upstream error payload, if any."""
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return None


def is_rate_limited(status: int, headers: Mapping[str, str], body: Any) -> bool:
    """Tell quota exhaustion apart from other upstream failures.

    The remaining-quota header is checked first, the message substring is
    kept because secondary rate limits do not always exhaust the quota.
    """
    if status not in (403, 429):
        return False
    if headers.get("X-RateLimit-Remaining") == "0":
        return True
    message = error_message(body) or ""
    return RATE_LIMIT_MESSAGE in message.lower()


async def read_json(res: ClientResponse) -> Any:
    """Parse a response body as JSON, returning None when it is not JSON."""
    try:
        return await res.json(content_type=None)
    except ValueError:
        return None


def check_artifact_metadata(body: Any) -> dict:
    """Reject contents payloads whose fields do not have the documented shape."""
    if not isinstance(body, dict):
        raise UpstreamError("Malformed GitHub metadata payload")
    commit = body.get("commit") or {}
    if not isinstance(commit, dict) or not isinstance(commit.get("committer") or {}, dict):
        raise UpstreamError("Malformed commit in GitHub metadata payload")
    size = body.get("size")
    if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
        raise UpstreamError("Malformed size in GitHub metadata payload")
    return body


class GitHubClient:
    """Handles the outbound calls to the upstream API."""

    def __init__(
        self,
        session: ClientSession,
        token: str | None = None,
        api_url: str | None = None,
        username: str | None = None,
    ):
        self.session = session
        self.token = config.GITHUB_TOKEN if token is None else token
        self.api_url = (api_url or config.GITHUB_API_URL).rstrip("/")
        self.username = username or config.GITHUB_USERNAME

    def check_credentials(self) -> None:
        if not self.token:
            logger.error("GITHUB_TOKEN is not set")
            raise ConfigurationError("Server configuration error: GitHub token missing.")

    def headers(self, accept: str = "application/vnd.github.v3+json", **extra: str | None) -> dict:
        headers = {"Accept": accept, "User-Agent": config.USER_AGENT}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        headers.update({key: value for key, value in extra.items() if value})
        return headers

    @property
    def artifact_metadata_url(self) -> str:
        return f"{self.api_url}/repos/{config.ARTIFACT_REPO}/contents/{quote(config.ARTIFACT_PATH)}"

    async def list_repositories(self, owner: str | None = None) -> list[dict]:
        """
        Get the full repository listing of an account.

        Raises:
            RateLimited: If the upstream reports quota exhaustion
            UpstreamError: For any other non-success or malformed response
        """
        url = f"{self.api_url}/users/{owner or self.username}/repos"
        params = {"type": "all", "sort": "pushed", "per_page": "100"}
        async with self.session.get(url, params=params, headers=self.headers()) as res:
            body = await read_json(res)
            if not res.ok:
                message = error_message(body)
                logger.error(f"GitHub API error {res.status}: {message}")
                if is_rate_limited(res.status, res.headers, body):
                    raise RateLimited("GitHub API rate limit exceeded on server.")
                raise UpstreamError(message or "Failed to fetch repositories from GitHub.")
            if not isinstance(body, list):
                raise UpstreamError("Malformed repository listing received from GitHub.")
            return body

    async def get_languages(self, owner: str, name: str) -> dict[str, int]:
        """Get the language -> byte count mapping of a repository."""
        url = f"{self.api_url}/repos/{owner}/{name}/languages"
        async with self.session.get(url, headers=self.headers()) as res:
            body = await read_json(res)
            if not res.ok:
                raise UpstreamError(error_message(body) or f"status {res.status}")
            if not isinstance(body, dict) or not all(
                isinstance(count, int) for count in body.values()
            ):
                raise UpstreamError("malformed languages payload")
            return body

    async def get_artifact_metadata(
        self, if_modified_since: str | None = None, if_none_match: str | None = None
    ) -> tuple[int, dict | None, str | None]:
        """
        Get the artifact metadata with an optional conditional request.

        Returns:
            Tuple of (status, metadata payload, entity tag); payload and tag
            are None when the upstream answers 304
        """
        headers = self.headers(
            **{"If-Modified-Since": if_modified_since, "If-None-Match": if_none_match}
        )
        async with self.session.get(self.artifact_metadata_url, headers=headers) as res:
            if res.status == 304:
                return res.status, None, None
            body = await read_json(res)
            if not res.ok:
                raise UpstreamError(
                    f"Failed to fetch GitHub metadata: {res.status} {error_message(body) or ''}".strip()
                )
            return res.status, check_artifact_metadata(body), res.headers.get("ETag")

    async def fetch_artifact_body(self) -> bytes:
        async with self.session.get(
            config.ARTIFACT_URL, headers={"Accept": "application/pdf", "User-Agent": config.USER_AGENT}
        ) as res:
            if not res.ok:
                raise UpstreamError(f"Failed to fetch artifact: {res.status}")
            return await res.read()

    def open_artifact_stream(self):
        """Request the raw artifact, to be used as `async with` context manager."""
        return self.session.get(
            config.ARTIFACT_URL, headers={"Accept": "application/pdf", "User-Agent": config.USER_AGENT}
        )

    async def ping(self) -> bool:
        async with self.session.head(self.api_url, headers=self.headers()) as res:
            return res.ok
