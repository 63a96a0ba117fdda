from typing import Literal

from pydantic import Field

from freshmarket.schemas.base import BaseSchema, NonEmptyStr, TimestampSchema

Category = Literal["Poultry", "Dairy", "Cereals", "Vegetables", "Fruits"]


class ProductBase(BaseSchema):
    name: NonEmptyStr = Field(max_length=100)
    price: float = Field(ge=0)
    availability: bool
    description: NonEmptyStr
    image: NonEmptyStr
    retailer_id: NonEmptyStr
    category: Category


class ProductCreate(ProductBase):
    pass


class ProductUpdate(ProductBase):
    pass


class Product(TimestampSchema, ProductBase):
    id: str
