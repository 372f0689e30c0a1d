"""JSON response classes using orjson serialization.

``ORJSONResponse`` is the application's default response class;
``HALJSONResponse`` is used by the resource routes so clients see the
``application/hal+json`` media type.
"""

from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from autorest.api.constants import HAL_MEDIA_TYPE


class ORJSONResponse(JSONResponse):
    """FastAPI Response class using orjson for JSON serialization.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump()

        # Use consistent sorting for predictable output
        return orjson.dumps(content, option=orjson.OPT_SORT_KEYS)


class HALJSONResponse(ORJSONResponse):
    """orjson response advertising the HAL media type."""

    media_type = HAL_MEDIA_TYPE
