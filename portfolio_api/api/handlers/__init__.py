"""
Request handlers for the API module.
"""

from .resource_handlers import (
    handle_allow_list,
    handle_artifact,
    handle_artifact_metadata,
    handle_resources,
    handle_webhook,
    handle_webhook_status,
)

__all__ = [
    "handle_resources",
    "handle_allow_list",
    "handle_artifact_metadata",
    "handle_artifact",
    "handle_webhook",
    "handle_webhook_status",
]
