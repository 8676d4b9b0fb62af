"""Collections of JSON:API resources and compound document assembly."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from itertools import chain
from typing import Any, Callable, Iterable, Iterator, Mapping

from jsonapi_resources.config import JSONAPI_MEDIA_TYPE
from jsonapi_resources.core.context import RequestContext
from jsonapi_resources.core.document import JSONAPIDocumentBuilder
from jsonapi_resources.pagination.base import PaginationBase
from jsonapi_resources.schemas.resource import RelationshipCollectionLink

from .resource import (
    JSONAPIResource,
    RelationshipLinkCallback,
    apply_relationship_link_callbacks,
    unique_resources,
)
from .response import JSONAPIResponse

logger = logging.getLogger(__name__)


class JSONAPIResourceCollection:
    """An ordered sequence of resources rendered as one JSON:API response.

    The collection is owned by a single response build. Builder methods
    (``map``, ``with_include_prefix``, ``with_relationship_link``) mutate it in
    place and return the same instance.
    """

    document_builder_class: type = JSONAPIDocumentBuilder

    def __init__(self, resources: Iterable[JSONAPIResource] = ()) -> None:
        self.resources: list[JSONAPIResource] = list(resources)
        self._relationship_link_callbacks: list[RelationshipLinkCallback] = []

    def __iter__(self) -> Iterator[JSONAPIResource]:
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} of {len(self.resources)}>"

    def get_document_builder(self) -> JSONAPIDocumentBuilder:
        """Instantiate the document builder."""
        return self.document_builder_class()

    def map(self, transform: Callable[[JSONAPIResource], JSONAPIResource]) -> "JSONAPIResourceCollection":
        """Replace every member with ``transform(member)``, keeping order."""
        self.resources = [transform(resource) for resource in self.resources]
        return self

    def with_include_prefix(self, prefix: str) -> "JSONAPIResourceCollection":
        """Propagate the dotted include prefix to every member."""
        for resource in self.resources:
            resource.with_include_prefix(prefix)
        return self

    def with_relationship_link(self, callback: RelationshipLinkCallback) -> "JSONAPIResourceCollection":
        """Register ``callback(link) -> link`` applied when resolved as a relationship."""
        self._relationship_link_callbacks.append(callback)
        return self

    def includable(self) -> list[JSONAPIResource]:
        return self.resources

    def included(self, ctx: RequestContext) -> list[list[JSONAPIResource]]:
        """Return the included resources of each member, not flattened."""
        return [resource.included(ctx) for resource in self.resources]

    def top_level_members(self, ctx: RequestContext) -> dict[str, Any]:
        """Return the deduplicated ``included`` resources and the ``jsonapi`` member.

        Included sets are flattened in member order and deduplicated by
        identity; the first occurrence of an identity wins.
        """
        return {
            "included": unique_resources(chain.from_iterable(self.included(ctx)), ctx),
            "jsonapi": JSONAPIResource.server_implementation_resolver()(ctx),
        }

    def to_resource_objects(self, ctx: RequestContext) -> list[dict[str, Any]]:
        return [resource.to_resource_object(ctx) for resource in self.resources]

    def pagination_information(
        self, paginated: Mapping[str, Any], default: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Return ``default`` with the links that did not resolve removed."""
        information = dict(default)
        information["links"] = {
            name: link for name, link in default["links"].items() if link is not None
        }
        return information

    def document_links(self, ctx: RequestContext) -> dict[str, str]:
        return {"self": ctx.url} if ctx.url else {}

    def to_document(
        self,
        ctx: RequestContext,
        *,
        paginator: PaginationBase | None = None,
        total: int | None = None,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return the compound document with the members as primary data."""
        document_links = dict(links) if links is not None else self.document_links(ctx)
        document_meta = dict(meta) if meta else {}
        if paginator is not None:
            total = len(self.resources) if total is None else total
            params = {"page": ctx.page, "base_url": ctx.url}
            pagination = self.pagination_information(
                {"total": total},
                {
                    "links": paginator.get_links(total=total, params=params),
                    "meta": paginator.get_meta(total=total, params=params),
                },
            )
            document_links.update(pagination["links"])
            document_meta.update(pagination["meta"])

        data = self.to_resource_objects(ctx)
        members = self.top_level_members(ctx)
        return self.get_document_builder().build_collection(
            data,
            included=[resource.to_resource_object(ctx) for resource in members["included"]],
            jsonapi=members["jsonapi"].to_dict(),
            links=document_links,
            meta=document_meta,
        )

    @contextmanager
    def response_scope(self, ctx: RequestContext) -> Iterator["JSONAPIResourceCollection"]:
        """Flush every member when the block exits, even on error."""
        try:
            yield self
        finally:
            self.flush()

    def to_response(
        self,
        ctx: RequestContext,
        *,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
        paginator: PaginationBase | None = None,
        total: int | None = None,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> JSONAPIResponse:
        """Render the document into a response, then release cached state."""
        with self.response_scope(ctx):
            response = JSONAPIResponse(
                self.to_document(ctx, paginator=paginator, total=total, links=links, meta=meta),
                status_code=status_code,
                headers=headers,
            )
            response.headers["content-type"] = JSONAPI_MEDIA_TYPE
        return response

    def to_resource_link(self, ctx: RequestContext) -> RelationshipCollectionLink:
        identifiers = [
            resource.resolve_resource_identifier(ctx)
            for resource in unique_resources(self.resources, ctx)
        ]
        return RelationshipCollectionLink(data=identifiers)

    def resolve_relationship_link(self, ctx: RequestContext) -> RelationshipCollectionLink:
        return apply_relationship_link_callbacks(self.to_resource_link(ctx), self._relationship_link_callbacks)

    def to_relationship_document(self, ctx: RequestContext) -> dict[str, Any]:
        """Return the relationship document for this collection."""
        return self.get_document_builder().build_relationship(
            self.resolve_relationship_link(ctx).to_dict(),
            jsonapi=JSONAPIResource.server_implementation_resolver()(ctx).to_dict(),
        )

    def flush(self) -> None:
        """Release the request-scoped state of every member."""
        logger.debug("Flushing %r", self)
        for resource in self.resources:
            resource.flush()
