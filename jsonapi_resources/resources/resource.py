"""Single-object JSON:API resource."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import reduce
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Iterable, Iterator, Mapping, Sequence

from sqlalchemy import inspect
from sqlalchemy.orm.attributes import NO_VALUE

from jsonapi_resources.config import JSONAPI_MEDIA_TYPE, get_settings
from jsonapi_resources.core.cache import ResourceCache
from jsonapi_resources.core.context import RequestContext
from jsonapi_resources.core.document import JSONAPIDocumentBuilder
from jsonapi_resources.core.identity import (
    IdentityKey,
    identity_key,
    resolve_primary_key,
    resolve_type_name,
)
from jsonapi_resources.schemas.resource import (
    RelationshipLink,
    ResourceIdentifier,
    ServerImplementation,
)

from .response import JSONAPIResponse

if TYPE_CHECKING:
    from .collection import JSONAPIResourceCollection

logger = logging.getLogger(__name__)

RelationshipLinkCallback = Callable[[Any], Any]
ServerImplementationResolver = Callable[[RequestContext], ServerImplementation]


def default_server_implementation(ctx: RequestContext) -> ServerImplementation:
    return ServerImplementation(version=get_settings().version)


def unique_resources(
    resources: Iterable["JSONAPIResource"], ctx: RequestContext
) -> list["JSONAPIResource"]:
    """Drop resources whose identity was already seen; first occurrence wins."""
    seen: set[str] = set()
    unique: list[JSONAPIResource] = []
    for resource in resources:
        key = resource.to_unique_resource_identifier(ctx)
        if key in seen:
            logger.debug("Dropping duplicate resource %s", key)
            continue
        seen.add(key)
        unique.append(resource)
    return unique


def apply_relationship_link_callbacks(link: Any, callbacks: Sequence[RelationshipLinkCallback]) -> Any:
    """Fold ``callbacks`` over ``link`` in registration order."""

    def apply(current: Any, callback: RelationshipLinkCallback) -> Any:
        result = callback(current)
        if result is None:
            raise TypeError(f"Relationship link callback {callback!r} must return a link.")
        return result

    return reduce(apply, callbacks, link)


class JSONAPIResource:
    """Transform one domain object into a JSON:API resource object.

    Subclasses describe the resource through ``Meta``:

    - ``type_``: resource type (defaults to the table or class name)
    - ``fields``: attribute names (defaults to public instance attributes)
    - ``relationships``: relationship name -> resource class or class name
    """

    class Meta:
        """Resource metadata (type, fields, relationships)."""

        type_: str = ""
        fields: list[str] = []
        relationships: dict[str, Any] = {}

    document_builder_class: type = JSONAPIDocumentBuilder

    _registry: ClassVar[dict[str, type["JSONAPIResource"]]] = {}
    _server_implementation_resolver: ClassVar[ServerImplementationResolver | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        JSONAPIResource._registry[cls.__name__] = cls

    def __init__(self, instance: Any) -> None:
        self.instance = instance
        self.include_prefix = ""
        self._relationship_link_callbacks: list[RelationshipLinkCallback] = []
        self._memo: dict[str, Any] = {}
        self._cached_in: list[tuple[ResourceCache, IdentityKey]] = []

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.instance!r}>"

    @classmethod
    def collection(cls, instances: Iterable[Any]) -> "JSONAPIResourceCollection":
        """Wrap every instance in this resource class."""
        from .collection import JSONAPIResourceCollection

        return JSONAPIResourceCollection(cls(instance) for instance in instances)

    @staticmethod
    def resolve_server_implementation_using(resolver: ServerImplementationResolver | None) -> None:
        """Replace the ``jsonapi`` member resolver; None restores the default."""
        JSONAPIResource._server_implementation_resolver = resolver

    @staticmethod
    def server_implementation_resolver() -> ServerImplementationResolver:
        return JSONAPIResource._server_implementation_resolver or default_server_implementation

    def get_document_builder(self) -> JSONAPIDocumentBuilder:
        """Instantiate the document builder."""
        return self.document_builder_class()

    def _meta(self, name: str, default: Any) -> Any:
        return getattr(self.Meta, name, default)

    def _memoize(self, name: str, factory: Callable[[], Any]) -> Any:
        if name not in self._memo:
            self._memo[name] = factory()
        return self._memo[name]

    def _remember(self, ctx: RequestContext, fragment: str, factory: Callable[[], Any]) -> Any:
        key = self.identity(ctx)
        if not any(cache is ctx.cache and cached == key for cache, cached in self._cached_in):
            self._cached_in.append((ctx.cache, key))
        return ctx.cache.remember(key, fragment, factory)

    # identity

    def get_id(self, instance: Any) -> str | None:
        """Return the primary key of the wrapped object."""
        return resolve_primary_key(instance)

    def get_type(self, instance: Any) -> str:
        """Return the resource type of the wrapped object."""
        return self._meta("type_", "") or resolve_type_name(instance)

    def identity(self, ctx: RequestContext) -> IdentityKey:
        return self._memoize(
            "identity", lambda: identity_key(self.get_type(self.instance), self.get_id(self.instance))
        )

    def resolve_id(self, ctx: RequestContext) -> str:
        return self.identity(ctx).id

    def resolve_type(self, ctx: RequestContext) -> str:
        return self.identity(ctx).type

    def to_unique_resource_identifier(self, ctx: RequestContext) -> str:
        return str(self.identity(ctx))

    def resolve_resource_identifier(self, ctx: RequestContext) -> ResourceIdentifier:
        return self._remember(
            ctx,
            "identifier",
            lambda: ResourceIdentifier(type=self.resolve_type(ctx), id=self.resolve_id(ctx)),
        )

    # attributes

    def _relationship_names(self) -> set[str]:
        names = set(self._meta("relationships", {}))
        state = inspect(self.instance, raiseerr=False)
        if state is not None:
            names.update(state.mapper.relationships.keys())
        return names

    def get_attributes(self, ctx: RequestContext) -> dict[str, Any]:
        """Return JSON:API attributes, honouring the sparse fieldset of the type."""
        requested = ctx.sparse_fields(self.resolve_type(ctx))
        allowed_fields = set(requested) if requested else None
        fields = self._meta("fields", [])
        if fields:
            base_fields = [field for field in fields if field != "id"]
            if allowed_fields is not None:
                base_fields = [field for field in base_fields if field in allowed_fields]
            return {field: getattr(self.instance, field) for field in base_fields}
        if hasattr(self.instance, "__dict__"):
            excluded = self._relationship_names()
            attrs = {
                key: value
                for key, value in vars(self.instance).items()
                if not key.startswith("_") and key != "id" and key not in excluded
            }
            if allowed_fields is not None:
                attrs = {key: value for key, value in attrs.items() if key in allowed_fields}
            return attrs
        return {}

    def get_links(self, ctx: RequestContext) -> dict[str, str] | None:
        base_url = ctx.base_url
        if not base_url:
            return None
        return {"self": f"{base_url}/{self.resolve_type(ctx)}/{self.resolve_id(ctx)}"}

    def get_meta(self, ctx: RequestContext) -> dict[str, Any] | None:
        return None

    # relationships

    def get_relationships(self, ctx: RequestContext) -> dict[str, Callable[[], Any]]:
        """Return lazy producers of related resources keyed by relationship name.

        Override to build relationships by hand; each producer returns a
        resource, a collection or None.
        """
        return {
            name: (lambda name=name, target=target: self._related(name, target))
            for name, target in self._meta("relationships", {}).items()
        }

    def _resolve_resource_class(self, target: Any) -> type["JSONAPIResource"]:
        if isinstance(target, str):
            try:
                return JSONAPIResource._registry[target]
            except KeyError:
                raise LookupError(f"Unknown resource class '{target}'.") from None
        return target

    def _relationship_loaded(self, name: str) -> bool:
        state = inspect(self.instance, raiseerr=False)
        if state is None or name not in state.attrs:
            return True
        return state.attrs[name].loaded_value is not NO_VALUE

    def _related(self, name: str, target: Any) -> Any:
        # never trigger a lazy load from the serializer
        if not self._relationship_loaded(name):
            logger.debug("Relationship '%s' of %r is not loaded", name, self.instance)
            relationship = inspect(self.instance).mapper.relationships.get(name)
            if relationship is not None and relationship.uselist:
                return self._resolve_resource_class(target).collection([])
            return None
        value = getattr(self.instance, name, None)
        if value is None:
            return None
        resource_class = self._resolve_resource_class(target)
        if isinstance(value, (list, tuple, set, frozenset)):
            return resource_class.collection(value)
        return resource_class(value)

    def requested_relationships(self, ctx: RequestContext) -> dict[str, Any]:
        """Return the related resources named by the include paths below this resource."""
        return self._memoize("relationships", lambda: self._resolve_requested_relationships(ctx))

    def _resolve_requested_relationships(self, ctx: RequestContext) -> dict[str, Any]:
        available = self.get_relationships(ctx)
        requested: dict[str, Any] = {}
        for name in ctx.includes_for_prefix(self.include_prefix):
            producer = available.get(name)
            if producer is None:
                logger.debug("Ignoring unknown include '%s%s' on %s", self.include_prefix, name, type(self).__name__)
                continue
            related = producer()
            if related is not None:
                related.with_include_prefix(f"{self.include_prefix}{name}")
            requested[name] = related
        return requested

    def with_include_prefix(self, prefix: str) -> "JSONAPIResource":
        """Resolve nested includes against the dotted path ``prefix``."""
        self.include_prefix = f"{prefix}." if prefix else ""
        return self

    def includable(self) -> list["JSONAPIResource"]:
        return [self]

    def included(self, ctx: RequestContext) -> list["JSONAPIResource"]:
        """Return every requested related resource, transitively, in discovery order."""
        resources: list[JSONAPIResource] = []
        for related in self.requested_relationships(ctx).values():
            if related is None:
                continue
            for resource in related.includable():
                resources.append(resource)
                resources.extend(resource.included(ctx))
        return resources

    def to_resource_link(self, ctx: RequestContext) -> RelationshipLink:
        return RelationshipLink(data=self.resolve_resource_identifier(ctx))

    def with_relationship_link(self, callback: RelationshipLinkCallback) -> "JSONAPIResource":
        """Register ``callback(link) -> link`` applied when this resource is a relationship target."""
        self._relationship_link_callbacks.append(callback)
        return self

    def resolve_relationship_link(self, ctx: RequestContext) -> RelationshipLink:
        return apply_relationship_link_callbacks(self.to_resource_link(ctx), self._relationship_link_callbacks)

    def to_relationship_document(self, ctx: RequestContext) -> dict[str, Any]:
        """Return the relationship document pointing at this resource."""
        return self.get_document_builder().build_relationship(
            self.resolve_relationship_link(ctx).to_dict(),
            jsonapi=self.server_implementation_resolver()(ctx).to_dict(),
        )

    def _relationship_objects(self, ctx: RequestContext) -> dict[str, Any]:
        allowed_fields = ctx.sparse_fields(self.resolve_type(ctx))
        objects: dict[str, Any] = {}
        for name, related in self.requested_relationships(ctx).items():
            if allowed_fields is not None and name not in allowed_fields:
                continue
            link = related.resolve_relationship_link(ctx) if related is not None else RelationshipLink()
            objects[name] = link.to_dict()
        return objects

    # serialization

    def to_resource_object(self, ctx: RequestContext) -> dict[str, Any]:
        """Return the resource object, computed once per identity and request."""
        return self._remember(ctx, "resource_object", lambda: self._build_resource_object(ctx))

    def _build_resource_object(self, ctx: RequestContext) -> dict[str, Any]:
        resource: dict[str, Any] = {
            "type": self.resolve_type(ctx),
            "id": self.resolve_id(ctx),
        }
        attributes = self.get_attributes(ctx)
        relationships = self._relationship_objects(ctx)
        links = self.get_links(ctx)
        meta = self.get_meta(ctx)
        if attributes:
            resource["attributes"] = attributes
        if relationships:
            resource["relationships"] = relationships
        if links:
            resource["links"] = links
        if meta:
            resource["meta"] = meta
        return resource

    def top_level_members(self, ctx: RequestContext) -> dict[str, Any]:
        """Return the ``included`` resources and the ``jsonapi`` member."""
        return {
            "included": unique_resources(self.included(ctx), ctx),
            "jsonapi": self.server_implementation_resolver()(ctx),
        }

    def document_links(self, ctx: RequestContext) -> dict[str, str] | None:
        return {"self": ctx.url} if ctx.url else None

    def to_document(
        self,
        ctx: RequestContext,
        *,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return the compound document with this resource as primary data."""
        data = self.to_resource_object(ctx)
        members = self.top_level_members(ctx)
        return self.get_document_builder().build_single(
            data,
            included=[resource.to_resource_object(ctx) for resource in members["included"]],
            jsonapi=members["jsonapi"].to_dict(),
            links=links if links is not None else self.document_links(ctx),
            meta=meta,
        )

    @contextmanager
    def response_scope(self, ctx: RequestContext) -> Iterator["JSONAPIResource"]:
        """Flush request-scoped state when the block exits, even on error."""
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
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> JSONAPIResponse:
        with self.response_scope(ctx):
            response = JSONAPIResponse(
                self.to_document(ctx, links=links, meta=meta),
                status_code=status_code,
                headers=headers,
            )
            response.headers["content-type"] = JSONAPI_MEDIA_TYPE
        return response

    def flush(self) -> None:
        """Release memoized state of this resource and its related resources."""
        memo, self._memo = self._memo, {}
        for related in (memo.get("relationships") or {}).values():
            if related is not None:
                related.flush()
        for cache, key in self._cached_in:
            cache.forget(key)
        self._cached_in.clear()
