"""JSON:API resources, collections and responses."""

from .collection import JSONAPIResourceCollection
from .resource import JSONAPIResource
from .response import JSONAPIResponse

__all__ = ["JSONAPIResource", "JSONAPIResourceCollection", "JSONAPIResponse"]
