"""Offset based JSON:API pagination."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode, urlsplit, urlunsplit

from .base import PaginationBase


class StandardPagination(PaginationBase):
    """page[offset]/page[limit] pagination."""

    def paginate_queryset(self, items: list[Any], params: dict[str, Any]) -> list[Any]:
        """Paginate based on page[offset] and page[limit]."""
        offset, limit = self.page_window(params)
        if offset < 0 or limit < 1:
            return items
        return items[offset : offset + limit]

    def get_links(self, *, total: int, params: dict[str, Any]) -> dict[str, str | None]:
        """Build pagination links; ``prev``/``next`` are None at the edges."""
        base_url = params.get("base_url")
        page = params.get("page") or {}
        offset, limit = self.page_window(params)
        if not base_url or limit < 1:
            return {}

        def build_url(page_offset: int) -> str:
            split = urlsplit(base_url)
            query_params = dict(page)
            query_params["offset"] = page_offset
            query_params["limit"] = limit
            query = urlencode({f"page[{k}]": v for k, v in query_params.items()})
            return urlunsplit((split.scheme, split.netloc, split.path, query, split.fragment))

        last_offset = max(0, (max(total - 1, 0) // limit) * limit)
        prev_offset = offset - limit
        next_offset = offset + limit
        return {
            "first": build_url(0),
            "last": build_url(last_offset),
            "prev": build_url(prev_offset) if prev_offset >= 0 else None,
            "next": build_url(next_offset) if next_offset <= last_offset else None,
            "self": build_url(offset),
        }

    def get_meta(self, *, total: int, params: dict[str, Any]) -> dict[str, Any]:
        """Build pagination metadata with total, limit, and offset."""
        offset, limit = self.page_window(params)
        return {
            "total": total,
            "limit": limit,
            "offset": offset,
        }
