import asyncio
from datetime import datetime, timezone

from aiohttp import ClientError, web
from aiohttp.web_request import Request

from portfolio_api.core.exceptions import ApiException
from portfolio_api.core.github import GitHubClient


async def check_health(request: Request, client: GitHubClient):
    try:
        reachable = await client.ping()
    except (ClientError, asyncio.TimeoutError):
        reachable = False
    if not reachable:
        raise ApiException(
            503,
            None,
            "Upstream unavailable",
            "GitHub API cannot be reached",
        )
    start_time = request.app["start_time"]
    current_time = datetime.now(timezone.utc)
    uptime_seconds = (current_time - start_time).total_seconds()
    return web.json_response(
        {"status": "ok", "version": request.app["app_version"], "uptime_seconds": uptime_seconds}
    )
