"""Pydantic schemas for JSON:API."""

from .resource import (
    JSONAPIDocument,
    JSONAPIErrorDocument,
    JSONAPIResource,
    JSONAPIResourceIdentifier,
    RelationshipCollectionLink,
    RelationshipLink,
    ResourceIdentifier,
    ServerImplementation,
)

__all__ = [
    "JSONAPIDocument",
    "JSONAPIErrorDocument",
    "JSONAPIResource",
    "JSONAPIResourceIdentifier",
    "RelationshipCollectionLink",
    "RelationshipLink",
    "ResourceIdentifier",
    "ServerImplementation",
]
