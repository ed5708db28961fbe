"""Shared schema bases and the response envelope."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict


DataT = TypeVar("DataT")

# Upper bound of an INTEGER primary key; larger ids can never match a row
MAX_RECORD_ID = 2**31 - 1


def _to_camel(string: str) -> str:
    parts = string.split("_")
    if len(parts) == 1:
        return string
    head, *tail = parts
    return head + "".join(word.capitalize() for word in tail)


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=_to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope wrapping every successful reply.

    Error replies use the same ``success``/``message`` keys and are built by
    ``olw.middleware.error_handlers.format_error_response``.
    """

    success: bool = True
    message: str = "Success"
    data: DataT | None = None


def ok(data: DataT | None = None, message: str = "Success") -> ApiResponse[DataT]:
    return ApiResponse(success=True, message=message, data=data)


def created(data: DataT, message: str = "Created successfully") -> ApiResponse[DataT]:
    return ApiResponse(success=True, message=message, data=data)
