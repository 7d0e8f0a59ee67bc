"""Success envelope shared by JSON endpoints."""

from datetime import UTC, datetime
from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys.

    Fields are declared in snake_case and accepted under either name.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def success_response(
    data: Any = None,
    message: str = "Success",
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Build a ``{"success": true, ...}`` response.

    Pydantic models in ``data`` are serialized by alias.
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "success": True,
            "message": message,
            "data": jsonable_encoder(data, by_alias=True),
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )
