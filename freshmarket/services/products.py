import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel as Schema
from sqlalchemy import func, select

from freshmarket.core.errors import ValidationError
from freshmarket.models.product import PRODUCT_CATEGORIES, Product
from freshmarket.models.user import User
from freshmarket.schemas.pagination import PageParams
from freshmarket.schemas.product import ProductBase, ProductCreate, ProductUpdate
from freshmarket.services.base import EntityService, validate_input

log = logging.getLogger(__name__)


class ProductService(EntityService[Product]):
    model = Product
    label = "Product"

    def _check_retailer(self, retailer_id: str) -> None:
        stmt = select(User.id).where(User.id == retailer_id, User.role == "retailer", User.deleted_at.is_(None))
        if self.db.scalars(stmt).first() is None:
            raise ValidationError("Validation error: retailerId does not reference an active retailer", field="retailerId")

    @staticmethod
    def _values(payload: ProductBase) -> dict:
        return payload.model_dump(by_alias=False)

    def create(self, data: Union[Schema, Mapping[str, Any]]) -> Product:
        payload = validate_input(ProductCreate, data)
        self._check_retailer(payload.retailer_id)
        return self._insert(Product(**self._values(payload)))

    def update(self, product_id: str, data: Union[Schema, Mapping[str, Any]]) -> Product:
        payload = validate_input(ProductUpdate, data)
        self._check_retailer(payload.retailer_id)
        product = self._conditional_update(product_id, self._values(payload))
        log.info("Product updated: %s", product.id)
        return product

    def _check_category(self, category: str) -> None:
        if category not in PRODUCT_CATEGORIES:
            raise ValidationError(
                f"Validation error: category must be one of {', '.join(PRODUCT_CATEGORIES)}",
                field="category",
            )

    def get_by_category(self, category: str, params: Optional[PageParams] = None) -> list[Product]:
        self._check_category(category)
        params = params or PageParams()
        stmt = (
            select(Product)
            .where(Product.category == category, *self._active())
            .order_by(Product.created_at, Product.id)
            .offset(params.offset)
            .limit(params.limit)
        )
        products = list(self.db.scalars(stmt))
        log.info("Fetched %d products in category %s", len(products), category)
        return products

    def count_by_category(self, category: str) -> int:
        self._check_category(category)
        stmt = select(func.count()).select_from(Product).where(Product.category == category, *self._active())
        return self.db.scalar(stmt) or 0

    def images_for_retailer(self, retailer_id: str) -> list[str]:
        # soft-deleted products too: the cascade removes them with the retailer
        stmt = select(Product.image).where(Product.retailer_id == retailer_id)
        return [image for image in self.db.scalars(stmt) if image]
