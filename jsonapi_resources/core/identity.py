"""Identity keys used for deduplication and cache lookups."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import inspect

from jsonapi_resources.core.errors import ResourceIdentityError


@dataclass(frozen=True)
class IdentityKey:
    """The ``(type, id)`` pair naming one resource within a document."""

    type: str
    id: str

    def __str__(self) -> str:
        return f"type:{self.type} id:{self.id}"


def identity_key(type_: Any, id_: Any) -> IdentityKey:
    """Build an identity key, failing fast on a missing type or id."""
    if type_ is None or str(type_) == "":
        raise ResourceIdentityError(f"Resource type is missing (id={id_!r}).")
    if id_ is None or str(id_) == "":
        raise ResourceIdentityError(f"Resource id is missing for type '{type_}'.")
    return IdentityKey(str(type_), str(id_))


def resolve_type_name(instance: Any) -> str:
    """Return the table name of a mapped object or its lower-cased class name."""
    return getattr(instance, "__tablename__", None) or instance.__class__.__name__.lower()


def resolve_primary_key(instance: Any) -> str | None:
    """Return the primary key of a domain object as a string.

    Persistent SQLAlchemy objects report their identity (composite keys are
    joined with ``,``); everything else falls back to the ``id`` attribute.
    """
    state = inspect(instance, raiseerr=False)
    identity = getattr(state, "identity", None) if state is not None else None
    if identity:
        return ",".join(str(part) for part in identity)
    value = getattr(instance, "id", None)
    return None if value is None else str(value)
