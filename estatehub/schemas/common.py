from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, Field

from estatehub.db.base import is_object_id

T = TypeVar("T")

# Upper bound on any monetary amount accepted from a client.
MAX_AMOUNT = Decimal("9999999.99")


def _check_object_id(value: str) -> str:
    if not is_object_id(value):
        raise ValueError("must be a 24-character hexadecimal id")
    return value.lower()


ObjectId = Annotated[str, AfterValidator(_check_object_id)]
Money = Annotated[Decimal, Field(ge=0, le=MAX_AMOUNT, decimal_places=2)]
PositiveMoney = Annotated[Decimal, Field(gt=0, le=MAX_AMOUNT, decimal_places=2)]


class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    page_size: int


class Acknowledgement(BaseModel):
    message: str


class UpdatedCount(BaseModel):
    updated_count: int
