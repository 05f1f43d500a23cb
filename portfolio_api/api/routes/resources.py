"""
Route definitions for the repository listing and the artifact endpoints.
"""

from aiohttp import web

from ..handlers.resource_handlers import (
    handle_allow_list,
    handle_artifact,
    handle_artifact_metadata,
    handle_resources,
    handle_webhook,
    handle_webhook_status,
)

routes = web.RouteTableDef()


@routes.get(r"/api/resources/", name="resources")
async def resources(request):
    """Get the curated repositories with their languages."""
    return await handle_resources(request)


@routes.get(r"/api/allow-list/", name="allow_list")
async def allow_list(request):
    return await handle_allow_list(request)


@routes.get(r"/api/artifact-metadata/", name="artifact_metadata")
async def artifact_metadata(request):
    """Get the cached artifact metadata."""
    return await handle_artifact_metadata(request)


@routes.get(r"/api/artifact/", name="artifact")
async def artifact(request):
    """Stream the artifact itself."""
    return await handle_artifact(request)


@routes.post(r"/api/webhook/", name="webhook")
async def webhook(request):
    """Receive push notifications from the upstream."""
    return await handle_webhook(request)


@routes.get(r"/api/webhook/", name="webhook_status")
async def webhook_status(request):
    return await handle_webhook_status(request)
