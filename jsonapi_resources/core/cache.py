"""Request-scoped memoization of computed resource fragments."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, TypeVar

from jsonapi_resources.core.identity import IdentityKey

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResourceCache:
    """Store computed representation fragments keyed by resource identity.

    One cache belongs to one request. Entries are added freely while a
    response is serialized and removed by ``forget``/``flush`` once the body
    has been produced.
    """

    def __init__(self) -> None:
        self._entries: dict[IdentityKey, dict[str, Any]] = {}

    def remember(self, key: IdentityKey, fragment: str, factory: Callable[[], T]) -> T:
        """Return the cached fragment for ``key``, computing it on first use."""
        entry = self._entries.get(key)
        if entry is not None and fragment in entry:
            logger.debug("Cache hit for %s [%s]", key, fragment)
            return entry[fragment]
        logger.debug("Cache miss for %s [%s]", key, fragment)
        value = factory()
        self._entries.setdefault(key, {})[fragment] = value
        return value

    def fragments(self, key: IdentityKey) -> Mapping[str, Any]:
        """Return the fragments stored for ``key`` (empty when unknown)."""
        return dict(self._entries.get(key, {}))

    def forget(self, key: IdentityKey) -> None:
        """Drop every fragment of ``key``."""
        self._entries.pop(key, None)

    def flush(self) -> None:
        """Drop everything."""
        logger.debug("Flushing %d cached resources", len(self._entries))
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
