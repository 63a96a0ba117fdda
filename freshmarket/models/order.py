from sqlalchemy import Column, Enum, ForeignKey, String
from sqlalchemy.orm import relationship

from freshmarket.models.base import BaseModel

ORDER_STATUSES = ("Processing", "Delivered", "Cancelled")


class Order(BaseModel):
    __tablename__ = "orders"

    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    client_name = Column(String(100), nullable=False)
    phone_number = Column(String(30), nullable=False)
    email = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False)
    status = Column(Enum(*ORDER_STATUSES, name="order_statuses"), nullable=False, default="Processing")

    product = relationship("Product")
