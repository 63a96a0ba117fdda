from typing import Literal

from pydantic import EmailStr

from freshmarket.schemas.base import BaseSchema, NonEmptyStr, TimestampSchema

OrderStatus = Literal["Processing", "Delivered", "Cancelled"]


class OrderBase(BaseSchema):
    product_id: NonEmptyStr
    client_name: NonEmptyStr
    phone_number: NonEmptyStr
    email: EmailStr
    address: NonEmptyStr
    status: OrderStatus = "Processing"


class OrderCreate(OrderBase):
    pass


class OrderUpdate(OrderBase):
    pass


class Order(TimestampSchema, OrderBase):
    id: str
