"""
Combo Service Unit Tests

Tests ComboService against an in-memory database:
- Pricing breakdown from stored products and combos
- Applicable combo detection
- Combo notice formatting

Run with:
    pytest tests/pricing/unit/test_combo_service.py -v
"""

import pytest

import config
from enums.allocation_order import AllocationOrder
from exceptions import EmptyCartError, UnknownProductError
from models.combo import CategoryRequirementDTO, ComboDTO
from models.pricing import CartLineDTO
from repositories.combo import ComboRepository
from services.combo import ComboService


def make_cart(*lines: tuple[str, int]) -> list[CartLineDTO]:
    return [CartLineDTO(product_id=product_id, quantity=quantity) for product_id, quantity in lines]


class TestGetPricingBreakdown:

    @pytest.mark.asyncio
    async def test_applies_stored_combo(self, test_session, seeded_catalog):
        breakdown = await ComboService.get_pricing_breakdown(
            make_cart(("banh-mi", 2), ("tra-sua", 1)), test_session
        )

        assert breakdown.summary.original_total == 70000
        assert breakdown.summary.final_total == 60000
        assert len(breakdown.combos) == 1
        assert breakdown.combos[0].combo_id == "combo-no-bung"
        assert breakdown.combos[0].name == "Combo no bụng"

    @pytest.mark.asyncio
    async def test_inactive_combo_not_applied(self, test_session, seeded_catalog):
        """Combo cũ (1 × Đồ ăn for 10.000 ₫) is inactive and must be ignored"""
        breakdown = await ComboService.get_pricing_breakdown(make_cart(("xoi", 1)), test_session)

        assert breakdown.combos == []
        assert breakdown.summary.final_total == 30000

    @pytest.mark.asyncio
    async def test_empty_cart_rejected(self, test_session, seeded_catalog):
        with pytest.raises(EmptyCartError):
            await ComboService.get_pricing_breakdown([], test_session)

    @pytest.mark.asyncio
    async def test_unknown_product_rejected(self, test_session, seeded_catalog):
        with pytest.raises(UnknownProductError):
            await ComboService.get_pricing_breakdown(make_cart(("banh-mi", 1), ("pho", 1)), test_session)

    @pytest.mark.asyncio
    async def test_uses_configured_search_cap(self, test_session, seeded_catalog, monkeypatch):
        """Two overlapping combos and a cap of 1 tuple force the greedy fallback"""
        await ComboRepository.add(ComboDTO(
            id="combo-doi",
            name="Combo đôi",
            price=40000,
            category_requirements=[
                CategoryRequirementDTO(category="Đồ ăn", quantity=1),
                CategoryRequirementDTO(category="Đồ uống", quantity=1),
            ],
        ), test_session)
        monkeypatch.setattr(config, "COMBO_SEARCH_MAX_TUPLES", 1)

        breakdown = await ComboService.get_pricing_breakdown(
            make_cart(("banh-mi", 2), ("tra-sua", 1)), test_session
        )

        assert breakdown.approximate is True
        assert breakdown.summary.final_total == 60000
        assert [combo.combo_id for combo in breakdown.combos] == ["combo-no-bung"]

    @pytest.mark.asyncio
    async def test_uses_configured_allocation_order(self, test_session, seeded_catalog, monkeypatch):
        """Bánh mì, Xôi, Xôi, Trà sữa: PRICE_DESC puts both Xôi into the combo"""
        cart = make_cart(("banh-mi", 1), ("xoi", 2), ("tra-sua", 1))

        by_input = await ComboService.get_pricing_breakdown(cart, test_session)
        monkeypatch.setattr(config, "COMBO_ALLOCATION_ORDER", AllocationOrder.PRICE_DESC)
        by_price = await ComboService.get_pricing_breakdown(cart, test_session)

        assert by_input.summary.final_total == 60000 + 30000
        assert by_price.summary.final_total == 60000 + 25000


class TestGetApplicableCombos:

    @pytest.mark.asyncio
    async def test_lists_fitting_combo(self, test_session, seeded_catalog):
        applicable = await ComboService.get_applicable_combos(
            make_cart(("banh-mi", 4), ("tra-sua", 2)), test_session
        )

        assert len(applicable) == 1
        assert applicable[0].combo_id == "combo-no-bung"
        assert applicable[0].max_applications == 2
        assert applicable[0].total_savings == 20000
        assert applicable[0].is_better_deal is True

    @pytest.mark.asyncio
    async def test_nothing_fits(self, test_session, seeded_catalog):
        applicable = await ComboService.get_applicable_combos(make_cart(("tra-sua", 3)), test_session)

        assert applicable == []

    @pytest.mark.asyncio
    async def test_empty_cart_rejected(self, test_session, seeded_catalog):
        with pytest.raises(EmptyCartError):
            await ComboService.get_applicable_combos([], test_session)


class TestFormatComboMessage:

    @pytest.mark.asyncio
    async def test_single_combo_vi(self, test_session, seeded_catalog):
        breakdown = await ComboService.get_pricing_breakdown(
            make_cart(("banh-mi", 2), ("tra-sua", 1)), test_session
        )

        message = ComboService.format_combo_message(breakdown, lang="vi")

        assert message == (
            'Đã tự động chuyển sang combo "Combo no bụng" vì rẻ hơn 10.000 ₫. '
            'Vui lòng kiểm tra đơn hàng.'
        )

    @pytest.mark.asyncio
    async def test_repeated_combo_en(self, test_session, seeded_catalog):
        breakdown = await ComboService.get_pricing_breakdown(
            make_cart(("banh-mi", 4), ("tra-sua", 2)), test_session
        )

        message = ComboService.format_combo_message(breakdown, lang="en")

        assert '"Combo no bụng × 2"' in message
        assert "saving 20,000 ₫" in message

    @pytest.mark.asyncio
    async def test_no_combo_no_message(self, test_session, seeded_catalog):
        breakdown = await ComboService.get_pricing_breakdown(make_cart(("banh-mi", 1)), test_session)

        assert ComboService.format_combo_message(breakdown) is None
