import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from models.base import Base


class Combo(Base):
    """
    Combo bundle: a fixed price for a set of category quantities.

    Example: "Combo no bụng" = 2 × Đồ ăn + 1 × Đồ uống for 60.000 ₫.
    Higher priority combos are preferred when pricing results tie.
    """
    __tablename__ = 'combos'

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    price = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    priority = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    category_requirements = relationship(
        "ComboCategoryRequirement",
        back_populates="combo",
        cascade="all, delete-orphan",
        order_by="ComboCategoryRequirement.id",
        lazy="selectin"
    )

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_combo_price_non_negative'),
    )


class ComboCategoryRequirement(Base):
    __tablename__ = 'combo_category_requirements'

    id = Column(Integer, primary_key=True, autoincrement=True)
    combo_id = Column(String(32), ForeignKey("combos.id", ondelete="CASCADE"), nullable=False)
    category = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)

    combo = relationship("Combo", back_populates="category_requirements")

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_requirement_quantity_positive'),
    )


class CategoryRequirementDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    category: str
    quantity: int


class ComboDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    name: str
    description: str | None = None
    price: int
    is_active: bool = True
    priority: int = 0
    category_requirements: list[CategoryRequirementDTO] = Field(default_factory=list)
    created_at: datetime | None = None
