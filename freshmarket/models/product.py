from sqlalchemy import Boolean, Column, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship

from freshmarket.models.base import BaseModel

PRODUCT_CATEGORIES = ("Poultry", "Dairy", "Cereals", "Vegetables", "Fruits")


class Product(BaseModel):
    __tablename__ = "products"

    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    availability = Column(Boolean, nullable=False, default=True)
    description = Column(Text, nullable=False)
    image = Column(String(255), nullable=False)
    retailer_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(Enum(*PRODUCT_CATEGORIES, name="product_categories"), nullable=False, index=True)

    retailer = relationship("User")
