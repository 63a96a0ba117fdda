import logging
from typing import Any, Mapping, Union

from pydantic import BaseModel as Schema
from sqlalchemy import select

from freshmarket.core.errors import ValidationError
from freshmarket.models.order import Order
from freshmarket.models.product import Product
from freshmarket.schemas.order import OrderBase, OrderCreate, OrderUpdate
from freshmarket.services.base import EntityService, validate_input

log = logging.getLogger(__name__)


class OrderService(EntityService[Order]):
    model = Order
    label = "Order"

    def _check_product(self, product_id: str) -> None:
        stmt = select(Product.id).where(Product.id == product_id, Product.deleted_at.is_(None))
        if self.db.scalars(stmt).first() is None:
            raise ValidationError("Validation error: productId does not reference an active product", field="productId")

    @staticmethod
    def _values(payload: OrderBase) -> dict:
        values = payload.model_dump(by_alias=False)
        values["email"] = str(payload.email)
        return values

    def create(self, data: Union[Schema, Mapping[str, Any]]) -> Order:
        payload = validate_input(OrderCreate, data)
        self._check_product(payload.product_id)
        return self._insert(Order(**self._values(payload)))

    def update(self, order_id: str, data: Union[Schema, Mapping[str, Any]]) -> Order:
        payload = validate_input(OrderUpdate, data)
        self._check_product(payload.product_id)
        order = self._conditional_update(order_id, self._values(payload))
        log.info("Order updated: %s", order.id)
        return order
