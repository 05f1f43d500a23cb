"""
Exception handling for the core module.

Domain errors are raised by the caches and the aggregator; the API layer
turns them into HTTP responses through `handle_exception`.
"""

import json

import sentry_sdk
from aiohttp import web


class PortfolioError(Exception):
    """Base class for errors propagated past the core components."""

    status = 500
    title = "Internal error"


class ConfigurationError(PortfolioError):
    """A required setting, such as the upstream credential, is missing"""

    title = "Server configuration error"


class RateLimited(PortfolioError):
    """The upstream API reported quota exhaustion"""

    status = 429
    title = "Upstream rate limit exceeded"


class UpstreamError(PortfolioError):
    """The upstream listing call failed for a reason other than rate limiting"""

    status = 502
    title = "Upstream error"


class UpstreamUnavailable(PortfolioError):
    """The upstream call failed and there was no cached record to fall back on"""

    status = 503
    title = "Upstream unavailable"


class ApiException(web.HTTPException):
    """Re-raise a domain error as aiohttp exception"""

    def __init__(self, status, error_code, title, detail) -> None:
        self.status_code = status
        error_body = {"message": detail, "title": title, "code": error_code}
        super().__init__(content_type="application/json", text=json.dumps(error_body))


def handle_exception(status: int, title: str, detail: str, resource: str | None = None):
    """Handle exceptions with Sentry integration."""
    event_id = None
    e = Exception(detail)
    if sentry_sdk.get_client().is_active():
        with sentry_sdk.new_scope() as scope:
            sentry_tags: dict = {
                "status": status,
                "title": title,
                "detail": detail,
            }
            if resource:
                sentry_tags["resource"] = resource
            scope.set_tags(sentry_tags)
            event_id = sentry_sdk.capture_exception(e)
    raise ApiException(status, event_id, title, detail)


def raise_for_domain_error(error: PortfolioError, resource: str | None = None):
    handle_exception(error.status, error.title, str(error), resource)
