"""JSON:API error handling middleware."""

import logging
from typing import Any

from jsonapi_resources.core.errors import JSONAPIError, JSONAPIErrorBuilder
from jsonapi_resources.resources.response import JSONAPIResponse

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware:
    """Convert exceptions into JSON:API error documents."""

    def __init__(self, app: Any) -> None:
        """Store the ASGI app for middleware chaining."""
        self.app = app
        self.error_builder = JSONAPIErrorBuilder()

    def error_object(self, exc: Exception) -> dict[str, Any]:
        if isinstance(exc, JSONAPIError):
            return exc.to_error_object()
        return self.error_builder.error_object(
            status="500", title="Internal Server Error", detail=str(exc) or None
        )

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        """Handle exceptions and serialize JSON:API error documents."""
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            logger.exception("Unhandled error while rendering %s", scope.get("path"))
            error = self.error_object(exc)
            response = JSONAPIResponse(
                self.error_builder.error_document([error]),
                status_code=int(error.get("status", 500)),
            )
            await response(scope, receive, send)
