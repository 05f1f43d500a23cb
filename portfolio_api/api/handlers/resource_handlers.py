"""
Request handlers for the repository listing and the artifact endpoints.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone

from aiohttp import ClientError, web

from portfolio_api import config
from portfolio_api.core.aggregator import RepositoryAggregator
from portfolio_api.core.allow_list import load_allow_list, owner_overrides, sorted_entries
from portfolio_api.core.exceptions import ApiException, PortfolioError, raise_for_domain_error
from portfolio_api.core.github import GitHubClient
from portfolio_api.core.webhook import touches_artifact, verify_signature

logger = logging.getLogger(__name__)


def _get_client(request) -> GitHubClient:
    """Get GitHubClient instance for the app session."""
    return GitHubClient(request.app["csession"])


def _cache_headers(max_age: int, etag: str | None = None, last_modified: str | None = None) -> dict:
    headers = {"Cache-Control": f"public, max-age={max_age}, s-maxage={max_age}"}
    if etag:
        headers["ETag"] = etag
    if last_modified:
        headers["Last-Modified"] = last_modified
    return headers


async def handle_resources(request):
    """Handle the curated repository listing requests."""
    aggregator = RepositoryAggregator(_get_client(request))
    try:
        resources = await aggregator.list_enriched_resources(
            owner_overrides(load_allow_list())
        )
    except PortfolioError as e:
        raise_for_domain_error(e, "resources")
    return web.json_response(
        [resource.to_dict() for resource in resources],
        headers={"Cache-Control": f"public, max-age={config.RESOURCES_MAX_AGE}"},
    )


async def handle_allow_list(request):
    """Handle requests for the curated repositories display configuration."""
    return web.json_response([entry.to_dict() for entry in sorted_entries(load_allow_list())])


async def handle_artifact_metadata(request):
    """Handle artifact metadata requests, honouring conditional headers."""
    if_none_match = request.headers.get("If-None-Match")
    cache = request.app["artifact_cache"]
    try:
        result = await cache.get_artifact_metadata(
            if_modified_since=request.headers.get("If-Modified-Since"),
            if_none_match=if_none_match,
        )
    except PortfolioError as e:
        raise_for_domain_error(e, "artifact-metadata")

    if result.not_modified:
        return web.Response(status=304)
    if result.stale:
        return web.json_response(result.to_dict(), headers=_cache_headers(config.STALE_MAX_AGE))

    headers = _cache_headers(config.FRESH_MAX_AGE, result.data.etag, result.data.last_modified)
    if if_none_match and if_none_match == result.data.etag:
        return web.Response(status=304, headers=headers)
    return web.json_response(result.to_dict(), headers=headers)


async def handle_artifact(request):
    """Handle raw artifact requests by streaming the upstream bytes."""
    client = _get_client(request)
    response = None
    try:
        async with client.open_artifact_stream() as res:
            if not res.ok:
                raise ApiException(502, None, "Upstream error", f"Failed to fetch PDF: {res.status}")
            response_headers = {
                "Content-Type": "application/pdf",
                "Content-Disposition": "inline",
                "Cache-Control": f"public, max-age={config.ARTIFACT_MAX_AGE}, s-maxage={config.ARTIFACT_MAX_AGE}",
                "X-Content-Type-Options": "nosniff",
                "X-Frame-Options": "SAMEORIGIN",
            }
            for header in ("ETag", "Last-Modified"):
                if res.headers.get(header):
                    response_headers[header] = res.headers[header]
            response = web.StreamResponse(headers=response_headers)
            await response.prepare(request)
            async for chunk in res.content.iter_chunked(1024):
                await response.write(chunk)
    except (ClientError, asyncio.TimeoutError) as e:
        logger.error(f"Error serving artifact: {e!r}")
        # headers are already sent, the truncated body is all the client gets
        if response is not None and response.prepared:
            return response
        raise ApiException(502, None, "Upstream error", "Failed to serve PDF")

    await response.write_eof()
    return response


async def handle_webhook(request):
    """Handle push notifications, expiring the artifact cache when it changed."""
    body = await request.read()
    if not verify_signature(body, request.headers.get("X-Hub-Signature-256")):
        raise ApiException(401, None, "Unauthorized", "Invalid signature")
    try:
        payload = json.loads(body)
    except ValueError:
        raise ApiException(400, None, "Invalid payload", "Webhook payload is not valid JSON")
    if not isinstance(payload, dict):
        raise ApiException(400, None, "Invalid payload", "Webhook payload must be an object")

    if touches_artifact(payload):
        logger.info("Artifact updated upstream, expiring cached metadata")
        request.app["artifact_cache"].expire()
        return web.json_response(
            {
                "message": "Resume update detected",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )
    return web.json_response({"message": "Webhook received"})


async def handle_webhook_status(request):
    return web.json_response(
        {
            "message": "GitHub webhook endpoint is active",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )
