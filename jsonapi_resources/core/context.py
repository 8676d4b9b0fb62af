"""Request-scoped serialization context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fastapi import Request

from jsonapi_resources.config import get_settings
from jsonapi_resources.core.cache import ResourceCache
from jsonapi_resources.utils.query_params import parse_query_params


@dataclass
class RequestContext:
    """Everything a resource needs from the current request.

    A context is created once per request and passed explicitly to every
    transformation call. It owns the request's ``ResourceCache``.
    """

    request: Request | None = None
    include: list[str] = field(default_factory=list)
    fields: dict[str, list[str]] = field(default_factory=dict)
    page: dict[str, Any] = field(default_factory=dict)
    cache: ResourceCache = field(default_factory=ResourceCache)

    @classmethod
    def from_request(cls, request: Request) -> "RequestContext":
        """Build a context from the JSON:API query parameters of ``request``."""
        params = parse_query_params(request.query_params)
        return cls(
            request=request,
            include=params["include"],
            fields=params["fields"],
            page=params["page"],
        )

    @property
    def url(self) -> str | None:
        return str(self.request.url) if self.request is not None else None

    @property
    def base_url(self) -> str | None:
        """Return the base URL used for resource links."""
        configured = get_settings().base_url
        if configured:
            return configured.rstrip("/")
        if self.request is None:
            return None
        return str(self.request.base_url).rstrip("/")

    def includes_for_prefix(self, prefix: str) -> list[str]:
        """Return the relationship names requested directly below ``prefix``.

        ``prefix`` is either empty or a dotted path ending in ``.``. A deeper
        path such as ``comments.author`` implies its parents.
        """
        names: list[str] = []
        for path in self.include:
            if not path.startswith(prefix):
                continue
            name = path[len(prefix) :].split(".", 1)[0]
            if name and name not in names:
                names.append(name)
        return names

    def sparse_fields(self, type_: str) -> list[str] | None:
        """Return the requested fieldset for ``type_`` or None for all fields."""
        return self.fields.get(type_) or None


async def get_request_context(request: Request) -> RequestContext:
    """FastAPI dependency returning a fresh context for the current request."""
    return RequestContext.from_request(request)
