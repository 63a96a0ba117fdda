from typing import Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from freshmarket.schemas.pagination import PageMeta

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Uniform success body: {statusCode, message, status, data}."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status_code: int
    message: str
    status: Literal["success"] = "success"
    data: Optional[T] = None
    pagination: Optional[PageMeta] = None


def success(data=None, *, message: str, status_code: int = 200, pagination: Optional[PageMeta] = None) -> dict:
    return {
        "statusCode": status_code,
        "message": message,
        "status": "success",
        "data": data,
        "pagination": pagination,
    }
