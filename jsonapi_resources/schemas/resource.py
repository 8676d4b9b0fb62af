"""Pydantic models for JSON:API identifiers, links and documents."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict


class JSONAPIResourceIdentifier(BaseModel):
    """Resource identifier object: type + id."""

    model_config = ConfigDict(frozen=True)

    type: str
    id: str
    meta: Optional[Dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


ResourceIdentifier = JSONAPIResourceIdentifier


class ServerImplementation(BaseModel):
    """Top-level ``jsonapi`` member describing the server implementation."""

    model_config = ConfigDict(frozen=True)

    version: str = "1.0"
    meta: Optional[Dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class _BaseRelationshipLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    links: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None

    def with_links(self, links: Mapping[str, Any]):
        """Return a copy with ``links`` merged into the existing links."""
        return self.model_copy(update={"links": {**(self.links or {}), **links}})

    def with_meta(self, meta: Mapping[str, Any]):
        """Return a copy with ``meta`` merged into the existing meta."""
        return self.model_copy(update={"meta": {**(self.meta or {}), **meta}})

    def _data(self) -> Any:
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        """Return the relationship object; ``data`` is always present."""
        document: dict[str, Any] = {"data": self._data()}
        if self.links:
            document["links"] = dict(self.links)
        if self.meta:
            document["meta"] = dict(self.meta)
        return document


class RelationshipLink(_BaseRelationshipLink):
    """To-one relationship linkage."""

    data: Optional[JSONAPIResourceIdentifier] = None

    def _data(self) -> Any:
        return self.data.to_dict() if self.data is not None else None


class RelationshipCollectionLink(_BaseRelationshipLink):
    """To-many relationship linkage."""

    data: List[JSONAPIResourceIdentifier] = []

    def _data(self) -> Any:
        return [identifier.to_dict() for identifier in self.data]


class JSONAPIResource(BaseModel):
    """Resource object with attributes and relationships."""

    type: str
    id: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None
    relationships: Optional[Dict[str, Any]] = None
    links: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None


class JSONAPIDocument(BaseModel):
    """Top-level JSON:API document."""

    data: Optional[Any] = None
    included: Optional[List[JSONAPIResource]] = None
    jsonapi: Optional[ServerImplementation] = None
    meta: Optional[Dict[str, Any]] = None
    links: Optional[Dict[str, Any]] = None


class JSONAPIErrorDocument(BaseModel):
    """Top-level JSON:API error document."""

    errors: List[Dict[str, Any]]
