"""JSON:API compound document rendering for FastAPI."""

from .core.context import RequestContext, get_request_context
from .core.document import JSONAPIDocumentBuilder
from .core.errors import JSONAPIErrorBuilder, ResourceIdentityError
from .resources.collection import JSONAPIResourceCollection
from .resources.resource import JSONAPIResource
from .resources.response import JSONAPIResponse

__all__ = [
    "JSONAPIDocumentBuilder",
    "JSONAPIErrorBuilder",
    "JSONAPIResource",
    "JSONAPIResourceCollection",
    "JSONAPIResponse",
    "RequestContext",
    "ResourceIdentityError",
    "get_request_context",
]
