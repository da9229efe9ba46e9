import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from enums.text_entity import TextEntity
from exceptions.cart import EmptyCartError
from models.combo import ComboDTO
from models.pricing import ApplicableComboDTO, CartLineDTO, PricingBreakdownDTO
from repositories.combo import ComboRepository
from repositories.product import ProductRepository
from services import combo_pricing
from utils.localizator import Localizator


class ComboService:
    """Service wiring the combo pricing engine to the product and combo storage."""

    @staticmethod
    async def get_pricing_breakdown(
        items: list[CartLineDTO],
        session: Session | AsyncSession
    ) -> PricingBreakdownDTO:
        """
        Calculate optimal combo pricing for cart items.

        Catalog and combos are read fresh for every call (no caching), so admin
        changes to prices or combos apply to the next request.

        Args:
            items: Cart lines (productId + quantity)
            session: Database session

        Returns:
            PricingBreakdownDTO with applied combos, individual items and summary

        Raises:
            EmptyCartError: If items is empty
            InvalidCartError: Unknown product or invalid quantity
            InvalidConfigurationError: Stored product/combo data is inconsistent
        """
        if not items:
            raise EmptyCartError()

        catalog = await ProductRepository.get_by_ids([item.product_id for item in items], session)
        combos = await ComboRepository.get_active(session)

        breakdown = combo_pricing.compute_pricing(
            items,
            catalog,
            combos,
            max_search_tuples=config.COMBO_SEARCH_MAX_TUPLES,
            allocation_order=config.COMBO_ALLOCATION_ORDER
        )

        logging.info(
            f"Priced cart: {len(items)} lines, {len(breakdown.combos)} combos applied, "
            f"total {breakdown.summary.original_total} -> {breakdown.summary.final_total}"
            f"{' (approximate)' if breakdown.approximate else ''}"
        )
        return breakdown

    @staticmethod
    async def get_applicable_combos(
        items: list[CartLineDTO],
        session: Session | AsyncSession
    ) -> list[ApplicableComboDTO]:
        """
        List active combos that fit the cart, best standalone savings first.

        Raises:
            EmptyCartError: If items is empty
            InvalidCartError: Unknown product or invalid quantity
        """
        if not items:
            raise EmptyCartError()

        catalog = await ProductRepository.get_by_ids([item.product_id for item in items], session)
        combos = await ComboRepository.get_active(session)
        return combo_pricing.find_applicable_combos(
            items,
            catalog,
            combos,
            allocation_order=config.COMBO_ALLOCATION_ORDER
        )

    @staticmethod
    async def get_active_combos(session: Session | AsyncSession) -> list[ComboDTO]:
        return await ComboRepository.get_active(session)

    @staticmethod
    async def get_categories(session: Session | AsyncSession) -> list[str]:
        return await ProductRepository.get_categories(session)

    @staticmethod
    def format_combo_message(breakdown: PricingBreakdownDTO, lang: str | None = None) -> str | None:
        """
        Format the notice shown when a cart switches to a combo.

        Example output (vi):
            Đã tự động chuyển sang combo "Combo no bụng" vì rẻ hơn 10.000 ₫. Vui lòng kiểm tra đơn hàng.

        Args:
            breakdown: Result from get_pricing_breakdown()
            lang: Optional language code

        Returns:
            Localized message, or None if no combo is applied
        """
        if not breakdown.combos:
            return None

        combo_names = ", ".join(
            application.name if application.applications == 1 else f"{application.name} × {application.applications}"
            for application in breakdown.combos
        )
        return Localizator.get_text(TextEntity.USER, "combo_applied", lang=lang).format(
            combo_names=combo_names,
            savings=Localizator.format_currency(breakdown.summary.total_savings, lang=lang)
        )

