"""HTTP response carrying a JSON:API document."""

from typing import Any

from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse

from jsonapi_resources.config import JSONAPI_MEDIA_TYPE


class JSONAPIResponse(JSONResponse):
    """JSONResponse served as ``application/vnd.api+json``."""

    media_type = JSONAPI_MEDIA_TYPE

    def render(self, content: Any) -> bytes:
        return super().render(jsonable_encoder(content))
