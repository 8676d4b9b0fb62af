"""Paginator interface consumed by resource collections."""

from typing import Any

from jsonapi_resources.config import get_settings


class PaginationBase:
    """Produce page slices, links and meta from the ``page[...]`` parameters.

    ``params`` carries ``page`` (the parsed page family) and, for links,
    ``base_url`` (the current request URL).
    """

    def page_window(self, params: dict[str, Any]) -> tuple[int, int]:
        """Return ``(offset, limit)``; the limit defaults to the configured page size."""
        page = params.get("page") or {}
        return int(page.get("offset", 0)), int(page.get("limit", get_settings().default_page_limit))

    def paginate_queryset(self, items: list[Any], params: dict[str, Any]) -> list[Any]:
        raise NotImplementedError

    def get_links(self, *, total: int, params: dict[str, Any]) -> dict[str, str | None]:
        """Return pagination links; a link that does not apply maps to None."""
        raise NotImplementedError

    def get_meta(self, *, total: int, params: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError
