from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """DTO serialized with camelCase keys for the storefront frontend."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartLineDTO(CamelModel):
    """Single cart line as sent by the cart and POS pages."""
    product_id: str
    quantity: int


class PricedItemDTO(CamelModel):
    """Units of one product priced at catalog price (e.g., "2 × Bánh mì = 50.000 ₫")."""
    product_id: str
    quantity: int
    subtotal: int


class ComboApplicationDTO(CamelModel):
    """One combo applied to the cart, possibly several times."""
    combo_id: str | None
    name: str
    applications: int
    unit_price: int
    total_price: int
    savings: int
    items: list[PricedItemDTO] = Field(default_factory=list)


class PricingSummaryDTO(CamelModel):
    original_total: int
    final_total: int
    total_savings: int
    savings_percentage: float


class PricingBreakdownDTO(CamelModel):
    """Complete result of combo pricing for a cart."""
    combos: list[ComboApplicationDTO]
    individual_items: list[PricedItemDTO]
    summary: PricingSummaryDTO
    approximate: bool = False


class ApplicableComboDTO(CamelModel):
    """Combo that fits the cart, evaluated on its own."""
    combo_id: str | None
    name: str
    price: int
    priority: int
    max_applications: int
    savings_per_application: int
    total_savings: int
    is_better_deal: bool


class OrderLineDTO(CamelModel):
    """Per-product order line produced by expanding a pricing breakdown."""
    product_id: str
    quantity: int
    unit_price: int
    from_combo: bool = False
    combo_id: str | None = None
    combo_name: str | None = None
