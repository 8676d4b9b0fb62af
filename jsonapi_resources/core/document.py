"""JSON:API document construction."""

from typing import Any, Iterable, Mapping


class JSONAPIDocumentBuilder:
    """Build JSON:API v1.1 documents from serialized data."""

    def build_single(
        self,
        resource: Mapping[str, Any],
        *,
        included: Iterable[Mapping[str, Any]] | None = None,
        jsonapi: Mapping[str, Any] | None = None,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a JSON:API document for a single resource object."""
        document: dict[str, Any] = {"data": dict(resource)}
        return self._with_members(document, included=included, jsonapi=jsonapi, links=links, meta=meta)

    def build_collection(
        self,
        resources: Iterable[Mapping[str, Any]],
        *,
        included: Iterable[Mapping[str, Any]] | None = None,
        jsonapi: Mapping[str, Any] | None = None,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a JSON:API document for a collection of resources."""
        document: dict[str, Any] = {"data": [dict(item) for item in resources]}
        return self._with_members(document, included=included, jsonapi=jsonapi, links=links, meta=meta)

    def build_relationship(
        self,
        relationship: Mapping[str, Any],
        *,
        jsonapi: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a relationship document (``data`` plus optional links/meta)."""
        document = dict(relationship)
        if jsonapi:
            document["jsonapi"] = dict(jsonapi)
        return document

    def _with_members(
        self,
        document: dict[str, Any],
        *,
        included: Iterable[Mapping[str, Any]] | None,
        jsonapi: Mapping[str, Any] | None,
        links: Mapping[str, Any] | None,
        meta: Mapping[str, Any] | None,
    ) -> dict[str, Any]:
        if included is not None:
            document["included"] = [dict(item) for item in included]
        if jsonapi:
            document["jsonapi"] = dict(jsonapi)
        if links:
            document["links"] = dict(links)
        if meta:
            document["meta"] = dict(meta)
        return document
