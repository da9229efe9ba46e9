"""
Combo Pricing Engine

Pure computation of the cheapest way to split a cart between combo bundles and
individual catalog prices. No I/O happens here: callers pass a catalog snapshot
and the combo registry, so the engine works the same with database-backed or
in-memory data.

Algorithm:
1. Merge duplicate cart lines, resolve them through the catalog and build the
   per-category pools.
2. Keep active combos that fit the pools at least once and could save money.
3. A single candidate is solved exactly by checking the counts at cart line
   boundaries. Otherwise enumerate every feasible application-count tuple
   (exhaustive search). If the tuple space is larger than the configured cap,
   fall back to a priority-ordered greedy pass that applies each combo in bulk
   and tag the result as approximate.
4. Pick the cheapest admissible tuple. Ties go to more applications, then
   higher priority combos, then registry order.
"""

import logging
import math
from typing import Iterable, Iterator, Mapping, Sequence

from pydantic import BaseModel

from enums.allocation_order import AllocationOrder
from exceptions.cart import InvalidQuantityError, UnknownProductError
from exceptions.combo import ComputationBoundExceeded, InvalidConfigurationError
from models.combo import ComboDTO
from models.pricing import (
    ApplicableComboDTO,
    ComboApplicationDTO,
    OrderLineDTO,
    PricedItemDTO,
    PricingBreakdownDTO,
    PricingSummaryDTO,
)
from models.product import ProductDTO

logger = logging.getLogger(__name__)

DEFAULT_MAX_SEARCH_TUPLES = 20000


class ResolvedLine(BaseModel):
    """Cart line joined with its catalog entry. `index` is the merged cart position."""
    index: int
    product_id: str
    category: str
    unit_price: int
    quantity: int


class ComboCandidate(BaseModel):
    """Active combo that fits the cart at least once."""
    position: int  # index in registry order
    combo: ComboDTO
    requirement_totals: dict[str, int]
    max_applications: int


class TupleEvaluation(BaseModel):
    """Cost of one application-count tuple under the deterministic allocation."""
    counts: tuple[int, ...]
    final_total: int
    consumed_values: tuple[int, ...]
    consumed: tuple[tuple[tuple[str, int], ...], ...]
    remaining: dict[int, int]

    def is_admissible(self, candidates: Sequence[ComboCandidate]) -> bool:
        """Every applied combo must be strictly cheaper than the units it replaces."""
        for candidate, count, value in zip(candidates, self.counts, self.consumed_values):
            if count and candidate.combo.price * count >= value:
                return False
        return True

    def selection_key(self) -> tuple:
        return (
            self.final_total,
            -sum(self.counts),
            tuple(-count for count in self.counts),
        )


# ============================================================================
# Validation and resolution
# ============================================================================

def _line_field(line, name: str, alias: str):
    if isinstance(line, Mapping):
        return line.get(name, line.get(alias))
    return getattr(line, name)


def _merge_cart_lines(cart_lines: Iterable) -> list[tuple[str, int]]:
    """
    Validate quantities and merge duplicate product lines.

    Quantities of repeated products are summed; the merged line keeps the
    position of the first occurrence.
    """
    merged: dict[str, int] = {}
    for line in cart_lines:
        product_id = _line_field(line, "product_id", "productId")
        quantity = _line_field(line, "quantity", "quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidQuantityError(product_id=product_id, quantity=quantity)
        merged[product_id] = merged.get(product_id, 0) + quantity
    return list(merged.items())


def _configuration_error(entity: str, entity_id: str | None, reason: str) -> InvalidConfigurationError:
    logger.error(f"[DataIntegrity] {entity} {entity_id}: {reason}")
    return InvalidConfigurationError(entity=entity, entity_id=entity_id, reason=reason)


def _resolve_lines(
    merged_lines: list[tuple[str, int]],
    catalog: Mapping[str, ProductDTO]
) -> list[ResolvedLine]:
    resolved = []
    for index, (product_id, quantity) in enumerate(merged_lines):
        product = catalog.get(product_id)
        if product is None:
            raise UnknownProductError(product_id=product_id)
        if product.price < 0:
            raise _configuration_error("product", product_id, f"negative price {product.price}")
        resolved.append(ResolvedLine(
            index=index,
            product_id=product_id,
            category=product.category,
            unit_price=product.price,
            quantity=quantity
        ))
    return resolved


def _validate_combo(combo: ComboDTO) -> None:
    if combo.price < 0:
        raise _configuration_error("combo", combo.id, f"negative price {combo.price}")
    if not combo.category_requirements:
        raise _configuration_error("combo", combo.id, "no category requirements")
    for requirement in combo.category_requirements:
        if requirement.quantity < 1:
            raise _configuration_error(
                "combo", combo.id,
                f"requirement for {requirement.category} has quantity {requirement.quantity}"
            )


def _requirement_totals(combo: ComboDTO) -> dict[str, int]:
    """Sum requirement quantities per category (a category may be listed twice)."""
    totals: dict[str, int] = {}
    for requirement in combo.category_requirements:
        totals[requirement.category] = totals.get(requirement.category, 0) + requirement.quantity
    return totals


def _category_pools(lines: Sequence[ResolvedLine]) -> dict[str, int]:
    pools: dict[str, int] = {}
    for line in lines:
        pools[line.category] = pools.get(line.category, 0) + line.quantity
    return pools


def _lines_by_category(
    lines: Sequence[ResolvedLine],
    allocation_order: AllocationOrder
) -> dict[str, list[ResolvedLine]]:
    """Cart lines per category, in the order combos consume them."""
    if allocation_order == AllocationOrder.PRICE_DESC:
        # sorted() is stable: equal prices stay in cart order
        ordered = sorted(lines, key=lambda line: -line.unit_price)
    else:
        ordered = list(lines)

    grouped: dict[str, list[ResolvedLine]] = {}
    for line in ordered:
        grouped.setdefault(line.category, []).append(line)
    return grouped


def _max_applications(requirement_totals: Mapping[str, int], pools: Mapping[str, int]) -> int:
    return min(pools.get(category, 0) // quantity for category, quantity in requirement_totals.items())


def _max_replaceable_value(
    requirement_totals: Mapping[str, int],
    lines_by_category: Mapping[str, list[ResolvedLine]]
) -> int:
    """Highest individual price one application could replace (most expensive units)."""
    value = 0
    for category, quantity in requirement_totals.items():
        needed = quantity
        for line in sorted(lines_by_category.get(category, []), key=lambda line: -line.unit_price):
            if needed == 0:
                break
            take = min(line.quantity, needed)
            value += take * line.unit_price
            needed -= take
    return value


def _build_candidates(
    combos: Sequence[ComboDTO],
    pools: Mapping[str, int],
    lines_by_category: Mapping[str, list[ResolvedLine]]
) -> list[ComboCandidate]:
    """
    Active combos that fit the cart and could save money, ordered by
    priority DESC then registry position.
    """
    candidates = []
    for position, combo in enumerate(combos):
        if not combo.is_active:
            continue
        _validate_combo(combo)
        totals = _requirement_totals(combo)
        max_applications = _max_applications(totals, pools)
        if max_applications == 0:
            continue
        if combo.price >= _max_replaceable_value(totals, lines_by_category):
            logger.debug(f"Combo {combo.id} ({combo.name}) skipped: price {combo.price} never beats individual prices")
            continue
        candidates.append(ComboCandidate(
            position=position,
            combo=combo,
            requirement_totals=totals,
            max_applications=max_applications
        ))

    candidates.sort(key=lambda candidate: (-candidate.combo.priority, candidate.position))
    return candidates


# ============================================================================
# Tuple evaluation and search
# ============================================================================

def _evaluate(
    counts: tuple[int, ...],
    candidates: Sequence[ComboCandidate],
    lines: Sequence[ResolvedLine],
    lines_by_category: Mapping[str, list[ResolvedLine]],
    original_total: int
) -> TupleEvaluation:
    """
    Allocate cart units to the combos of a tuple and price the rest individually.

    Combos consume in candidate order, each category total walking its lines in
    allocation order, so application k of a combo always takes the k-th block
    of units. Assumes the tuple is feasible.
    """
    remaining = {line.index: line.quantity for line in lines}
    consumed_values = []
    consumed = []
    combo_total = 0

    for candidate, count in zip(candidates, counts):
        value = 0
        taken: dict[str, int] = {}
        if count:
            combo_total += candidate.combo.price * count
            for category, quantity in candidate.requirement_totals.items():
                needed = quantity * count
                for line in lines_by_category.get(category, []):
                    if needed == 0:
                        break
                    take = min(remaining[line.index], needed)
                    if take == 0:
                        continue
                    remaining[line.index] -= take
                    needed -= take
                    value += take * line.unit_price
                    taken[line.product_id] = taken.get(line.product_id, 0) + take
        consumed_values.append(value)
        consumed.append(tuple(taken.items()))

    final_total = combo_total + original_total - sum(consumed_values)
    # Called once per tuple: skip validation, all fields are built here
    return TupleEvaluation.model_construct(
        counts=counts,
        final_total=final_total,
        consumed_values=tuple(consumed_values),
        consumed=tuple(consumed),
        remaining=remaining
    )


def _feasible_tuples(
    candidates: Sequence[ComboCandidate],
    pools: Mapping[str, int]
) -> Iterator[tuple[int, ...]]:
    """Depth-first enumeration of application counts that fit the category pools."""

    def walk(depth: int, remaining_pools: dict[str, int], prefix: tuple[int, ...]):
        if depth == len(candidates):
            yield prefix
            return
        totals = candidates[depth].requirement_totals
        limit = _max_applications(totals, remaining_pools)
        for count in range(limit + 1):
            next_pools = dict(remaining_pools)
            for category, quantity in totals.items():
                next_pools[category] -= quantity * count
            yield from walk(depth + 1, next_pools, prefix + (count,))

    yield from walk(0, dict(pools), ())


def _exhaustive_search(
    candidates: Sequence[ComboCandidate],
    lines: Sequence[ResolvedLine],
    lines_by_category: Mapping[str, list[ResolvedLine]],
    pools: Mapping[str, int],
    original_total: int,
    max_search_tuples: int
) -> TupleEvaluation:
    """
    Evaluate every feasible tuple and return the best admissible one.

    Raises:
        ComputationBoundExceeded: If the tuple space exceeds max_search_tuples
    """
    search_space = math.prod(candidate.max_applications + 1 for candidate in candidates)
    if search_space > max_search_tuples:
        raise ComputationBoundExceeded(tuple_count=search_space, limit=max_search_tuples)

    best = None
    for counts in _feasible_tuples(candidates, pools):
        evaluation = _evaluate(counts, candidates, lines, lines_by_category, original_total)
        if not evaluation.is_admissible(candidates):
            continue
        if best is None or evaluation.selection_key() < best.selection_key():
            best = evaluation
    return best


def _remaining_pools(
    counts: Sequence[int],
    candidates: Sequence[ComboCandidate],
    pools: Mapping[str, int]
) -> dict[str, int]:
    remaining = dict(pools)
    for candidate, count in zip(candidates, counts):
        for category, quantity in candidate.requirement_totals.items():
            remaining[category] = remaining.get(category, 0) - quantity * count
    return remaining


def _single_combo_search(
    candidate: ComboCandidate,
    lines: Sequence[ResolvedLine],
    lines_by_category: Mapping[str, list[ResolvedLine]],
    original_total: int
) -> TupleEvaluation:
    """
    Exact search when only one combo fits the cart.

    Application k consumes the k-th block of units of each category, so
    between two line boundaries every extra application saves the same
    amount and the total is linear in the count. Only counts at those
    boundaries (plus 0 and the maximum) can be optimal.
    """
    counts = {0, candidate.max_applications}
    for category, quantity in candidate.requirement_totals.items():
        consumed = 0
        for line in lines_by_category.get(category, []):
            consumed += line.quantity
            for count in (consumed // quantity, -(-consumed // quantity)):
                if count <= candidate.max_applications:
                    counts.add(count)

    best = None
    for count in sorted(counts):
        evaluation = _evaluate((count,), [candidate], lines, lines_by_category, original_total)
        if not evaluation.is_admissible([candidate]):
            continue
        if best is None or evaluation.selection_key() < best.selection_key():
            best = evaluation
    return best


def _greedy_search(
    candidates: Sequence[ComboCandidate],
    lines: Sequence[ResolvedLine],
    lines_by_category: Mapping[str, list[ResolvedLine]],
    pools: Mapping[str, int],
    original_total: int
) -> TupleEvaluation:
    """
    Approximate search for large tuple spaces.

    Combos are taken by priority DESC, then savings per consumed unit DESC,
    then registry order. Each combo gets the largest application count found
    by binary search that fits the units left and keeps lowering the total,
    so the work grows with log(quantity) instead of quantity.
    """
    empty = tuple(0 for _ in candidates)

    def savings_per_unit(index: int) -> float:
        single = tuple(1 if i == index else 0 for i in range(len(candidates)))
        evaluation = _evaluate(single, candidates, lines, lines_by_category, original_total)
        units = sum(candidates[index].requirement_totals.values())
        return (original_total - evaluation.final_total) / units

    greedy_order = sorted(
        range(len(candidates)),
        key=lambda i: (-candidates[i].combo.priority, -savings_per_unit(i), candidates[i].position)
    )

    counts = list(empty)
    best = _evaluate(empty, candidates, lines, lines_by_category, original_total)
    for index in greedy_order:
        remaining = _remaining_pools(counts, candidates, pools)
        low, high = 0, _max_applications(candidates[index].requirement_totals, remaining)
        improved = None
        while low < high:
            mid = (low + high + 1) // 2
            counts[index] = mid
            trial = _evaluate(tuple(counts), candidates, lines, lines_by_category, original_total)
            if trial.is_admissible(candidates) and trial.final_total < best.final_total:
                low, improved = mid, trial
            else:
                high = mid - 1
        counts[index] = low
        if improved is not None:
            best = improved
    return best


# ============================================================================
# Public API
# ============================================================================

def _build_breakdown(
    evaluation: TupleEvaluation,
    candidates: Sequence[ComboCandidate],
    lines: Sequence[ResolvedLine],
    original_total: int,
    approximate: bool
) -> PricingBreakdownDTO:
    unit_prices = {line.product_id: line.unit_price for line in lines}

    combo_applications = []
    for candidate, count, value, taken in zip(
        candidates, evaluation.counts, evaluation.consumed_values, evaluation.consumed
    ):
        if count == 0:
            continue
        total_price = candidate.combo.price * count
        combo_applications.append(ComboApplicationDTO(
            combo_id=candidate.combo.id,
            name=candidate.combo.name,
            applications=count,
            unit_price=candidate.combo.price,
            total_price=total_price,
            savings=value - total_price,
            items=[
                PricedItemDTO(product_id=product_id, quantity=quantity, subtotal=quantity * unit_prices[product_id])
                for product_id, quantity in taken
            ]
        ))

    individual_items = [
        PricedItemDTO(
            product_id=line.product_id,
            quantity=evaluation.remaining[line.index],
            subtotal=evaluation.remaining[line.index] * line.unit_price
        )
        for line in lines
        if evaluation.remaining[line.index] > 0
    ]

    total_savings = original_total - evaluation.final_total
    savings_percentage = round(total_savings * 100 / original_total, 2) if original_total else 0.0

    return PricingBreakdownDTO(
        combos=combo_applications,
        individual_items=individual_items,
        summary=PricingSummaryDTO(
            original_total=original_total,
            final_total=evaluation.final_total,
            total_savings=total_savings,
            savings_percentage=savings_percentage
        ),
        approximate=approximate
    )


def compute_pricing(
    cart_lines: Iterable,
    catalog: Mapping[str, ProductDTO],
    combos: Sequence[ComboDTO],
    *,
    max_search_tuples: int = DEFAULT_MAX_SEARCH_TUPLES,
    allocation_order: AllocationOrder = AllocationOrder.INPUT
) -> PricingBreakdownDTO:
    """
    Compute the optimal combo pricing breakdown for a cart.

    Example with combo "2 × Đồ ăn + 1 × Đồ uống = 60.000 ₫" and a cart of
    2 × Bánh mì (25.000 ₫) + 1 × Trà sữa (20.000 ₫):
        - Individual total: 70.000 ₫
        - Combo applied once: 60.000 ₫, savings 10.000 ₫

    Args:
        cart_lines: CartLineDTOs or dicts with productId/product_id and quantity
        catalog: Mapping product_id -> ProductDTO (must cover every cart product)
        combos: Combo registry in registry order; inactive combos are ignored
        max_search_tuples: Cap on the exhaustive search space
        allocation_order: Order in which category units are consumed by combos

    Returns:
        PricingBreakdownDTO (approximate=True when the greedy fallback was used)

    Raises:
        InvalidCartError: Unknown product or non-positive quantity
        InvalidConfigurationError: Product or combo data violates pricing invariants
    """
    lines = _resolve_lines(_merge_cart_lines(cart_lines), catalog)
    original_total = sum(line.unit_price * line.quantity for line in lines)
    pools = _category_pools(lines)
    lines_by_category = _lines_by_category(lines, allocation_order)
    candidates = _build_candidates(combos, pools, lines_by_category)

    approximate = False
    if len(candidates) == 1:
        best = _single_combo_search(candidates[0], lines, lines_by_category, original_total)
    else:
        try:
            best = _exhaustive_search(
                candidates, lines, lines_by_category, pools, original_total, max_search_tuples
            )
        except ComputationBoundExceeded as e:
            logger.warning(f"{e} - using greedy approximation ({len(candidates)} combos)")
            best = _greedy_search(candidates, lines, lines_by_category, pools, original_total)
            approximate = True

    return _build_breakdown(best, candidates, lines, original_total, approximate)


def find_applicable_combos(
    cart_lines: Iterable,
    catalog: Mapping[str, ProductDTO],
    combos: Sequence[ComboDTO],
    *,
    allocation_order: AllocationOrder = AllocationOrder.INPUT
) -> list[ApplicableComboDTO]:
    """
    List every active combo that fits the cart, each evaluated on its own.

    Unlike compute_pricing(), combos that would not save money are included
    (with is_better_deal=False) so admins can see why a combo was not applied.
    Sorted by total savings DESC, then priority DESC, then registry order.
    """
    lines = _resolve_lines(_merge_cart_lines(cart_lines), catalog)
    original_total = sum(line.unit_price * line.quantity for line in lines)
    pools = _category_pools(lines)
    lines_by_category = _lines_by_category(lines, allocation_order)

    applicable = []
    for position, combo in enumerate(combos):
        if not combo.is_active:
            continue
        _validate_combo(combo)
        totals = _requirement_totals(combo)
        max_applications = _max_applications(totals, pools)
        if max_applications == 0:
            continue

        candidate = ComboCandidate(
            position=position, combo=combo, requirement_totals=totals, max_applications=max_applications
        )
        single = _evaluate((1,), [candidate], lines, lines_by_category, original_total)
        full = _evaluate((max_applications,), [candidate], lines, lines_by_category, original_total)
        total_savings = max(0, original_total - full.final_total)
        applicable.append((position, ApplicableComboDTO(
            combo_id=combo.id,
            name=combo.name,
            price=combo.price,
            priority=combo.priority,
            max_applications=max_applications,
            savings_per_application=max(0, original_total - single.final_total),
            total_savings=total_savings,
            is_better_deal=total_savings > 0
        )))

    applicable.sort(key=lambda entry: (-entry[1].total_savings, -entry[1].priority, entry[0]))
    return [dto for _, dto in applicable]


def expand_breakdown_items(breakdown: PricingBreakdownDTO) -> list[OrderLineDTO]:
    """
    Flatten a breakdown into per-product order lines.

    Combo units come first (tagged with their combo), then individually priced
    units. Unit prices are catalog prices; the combo discount lives on the
    combo entry, not on the lines.
    """
    order_lines = []
    for application in breakdown.combos:
        for item in application.items:
            order_lines.append(OrderLineDTO(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.subtotal // item.quantity,
                from_combo=True,
                combo_id=application.combo_id,
                combo_name=application.name
            ))
    for item in breakdown.individual_items:
        order_lines.append(OrderLineDTO(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.subtotal // item.quantity
        ))
    return order_lines


def _combo_signature(breakdown: PricingBreakdownDTO | None) -> list[tuple[str, int]]:
    if breakdown is None:
        return []
    return sorted(
        (application.combo_id or application.name, application.applications)
        for application in breakdown.combos
    )


def has_combo_changed(
    new_breakdown: PricingBreakdownDTO | None,
    previous_breakdown: PricingBreakdownDTO | None
) -> bool:
    """
    Whether the applied combos differ between two pricing snapshots.

    Used to decide if the customer should be told that their cart switched to
    (or away from) a combo. Only combo identity and application counts matter;
    a missing snapshot counts as "no combos".
    """
    return _combo_signature(new_breakdown) != _combo_signature(previous_breakdown)
