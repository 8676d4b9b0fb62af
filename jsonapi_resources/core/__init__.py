"""Core JSON:API document, identity, cache and error helpers."""

from .cache import ResourceCache
from .context import RequestContext, get_request_context
from .document import JSONAPIDocumentBuilder
from .errors import JSONAPIError, JSONAPIErrorBuilder, ResourceIdentityError
from .identity import IdentityKey, identity_key

__all__ = [
    "IdentityKey",
    "JSONAPIDocumentBuilder",
    "JSONAPIError",
    "JSONAPIErrorBuilder",
    "RequestContext",
    "ResourceCache",
    "ResourceIdentityError",
    "get_request_context",
    "identity_key",
]
