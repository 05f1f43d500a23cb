"""
Main API application factory.

This module creates the aiohttp application with all routes and middleware.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

import sentry_sdk
import yaml
from aiohttp import ClientSession, ClientTimeout, web
from aiohttp_swagger import setup_swagger

from portfolio_api import config
from portfolio_api.core.cors import cors_middleware
from portfolio_api.core.freshness import FreshnessCache
from portfolio_api.core.github import GitHubClient
from portfolio_api.core.health import check_health
from portfolio_api.core.sentry import get_sentry_kwargs
from portfolio_api.core.version import get_app_version

from .routes.resources import routes as resource_routes

SWAGGER_FILE = Path(__file__).parent.parent / "swagger.yaml"


async def health_handler(request):
    """Handle health check requests."""
    return await check_health(request, GitHubClient(request.app["csession"]))


async def app_factory():
    """Create and configure the aiohttp application."""
    sentry_sdk.init(**get_sentry_kwargs())

    async def on_startup(app):
        app["csession"] = ClientSession(timeout=ClientTimeout(total=config.UPSTREAM_TIMEOUT))
        app["start_time"] = datetime.now(timezone.utc)
        # empty at process start, lives until shutdown
        app["artifact_cache"] = FreshnessCache(GitHubClient(app["csession"]))

    async def on_cleanup(app):
        await app["csession"].close()

    app = web.Application(middlewares=[cors_middleware])
    app["app_version"] = await get_app_version()

    app.add_routes(resource_routes)
    app.router.add_get("/health/", health_handler)

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    with open(SWAGGER_FILE, "r") as f:
        swagger_info = yaml.safe_load(f)
    swagger_info["info"]["version"] = app["app_version"]
    setup_swagger(
        app,
        swagger_url=config.DOC_PATH,
        ui_version=3,
        swagger_info=swagger_info,
    )

    return app


def run():
    """Run the application."""
    logging.basicConfig(level=logging.INFO)
    web.run_app(app_factory(), path=os.environ.get("PORTFOLIO_API_SOCKET_PATH"))
