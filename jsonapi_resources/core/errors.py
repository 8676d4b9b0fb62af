"""JSON:API exceptions and error object templates."""

from http import HTTPStatus
from typing import Any


class JSONAPIError(Exception):
    """Base class for errors rendered as JSON:API error objects."""

    status: str = str(HTTPStatus.INTERNAL_SERVER_ERROR.value)
    title: str = "Internal Server Error"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail

    def to_error_object(self) -> dict[str, Any]:
        return JSONAPIErrorBuilder().error_object(
            status=self.status, title=self.title, detail=self.detail or None
        )


class ResourceIdentityError(JSONAPIError, ValueError):
    """
    Raised when a domain object cannot yield a type or primary key.
    This is a configuration error: deduplication and linkage cannot proceed without it.
    """

    title = "Resource Identity Error"


class JSONAPIErrorBuilder:
    """Build JSON:API error objects and error documents."""

    def error_object(
        self,
        *,
        status: str | None = None,
        code: str | None = None,
        title: str | None = None,
        detail: str | None = None,
        source: dict[str, Any] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a JSON:API error object."""
        error: dict[str, Any] = {}
        if status is not None:
            error["status"] = status
        if code is not None:
            error["code"] = code
        if title is not None:
            error["title"] = title
        if detail is not None:
            error["detail"] = detail
        if source is not None:
            error["source"] = source
        if meta is not None:
            error["meta"] = meta
        if not error:
            raise ValueError("Error object must include at least one field.")
        return error

    def error_document(self, errors: list[dict[str, Any]]) -> dict[str, Any]:
        """Return a JSON:API document with an errors array."""
        return {"errors": errors}
