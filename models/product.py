import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, String, Integer, Boolean, DateTime, CheckConstraint

from models.base import Base


class Product(Base):
    """
    Product sold in the preorder storefront.

    Prices are whole VND amounts. The category is free text shared with
    combo requirements (e.g., "Đồ ăn", "Đồ uống", "Tráng miệng", "Khác").
    """
    __tablename__ = 'products'

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False, default="")
    price = Column(Integer, nullable=False)
    category = Column(String, nullable=False, index=True)
    available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_non_negative'),
    )


class ProductDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str | None = None
    name: str | None = None
    description: str | None = None
    price: int
    category: str
    available: bool = True
