"""
API router for combo pricing.

Serves the cart page and the seller POS page of the storefront. Every route is
stateless and side-effect-free: the same cart against unchanged products and
combos always yields the same JSON.

Response envelope:
    {"success": true, "data": {...}}
    {"success": false, "message": "..."}
"""

import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_db_session
from enums.text_entity import TextEntity
from models.pricing import CamelModel, CartLineDTO
from services.combo import ComboService
from utils.localizator import Localizator

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api/combos", tags=["combos"])

SUPPORTED_LANGUAGES = ("vi", "en")

# Storefront order limits
MAX_LINE_QUANTITY = 100
MAX_CART_LINES = 100


def generate_correlation_id() -> str:
    """Generate unique correlation ID for request tracing."""
    return f"{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"


def request_language(request: Request) -> str:
    """Pick the message language from Accept-Language, falling back to config.LANGUAGE."""
    header = request.headers.get("Accept-Language", "")
    primary = header.split(",")[0].split("-")[0].strip().lower()
    return primary if primary in SUPPORTED_LANGUAGES else config.LANGUAGE


async def db_session():
    async with get_db_session() as session:
        yield session


class CartItemPayload(CartLineDTO):
    """Cart line with request-level validation."""
    product_id: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(..., gt=0, le=MAX_LINE_QUANTITY, strict=True)


class CartPayload(CamelModel):
    """Body of POST /api/combos/pricing and /api/combos/detect."""
    items: list[CartItemPayload] = Field(..., min_length=1, max_length=MAX_CART_LINES)


@api_router.post("/pricing")
async def calculate_pricing(payload: CartPayload, session: AsyncSession = Depends(db_session)):
    """
    Calculate optimal pricing for cart items.

    Request Body:
        {"items": [{"productId": "6f1c...", "quantity": 2}]}

    Returns:
        200: {"success": true, "data": PricingBreakdown}
        400: Invalid cart (empty, unknown product, bad quantity)
        500: Inconsistent product/combo data or server error

    Example:
        curl -X POST http://localhost:5000/api/combos/pricing \\
          -H "Content-Type: application/json" \\
          -d '{"items":[{"productId":"p1","quantity":2}]}'
    """
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] Pricing request with {len(payload.items)} lines")

    breakdown = await ComboService.get_pricing_breakdown(payload.items, session)

    if breakdown.approximate:
        logger.warning(f"[{correlation_id}] Returned approximate pricing (search cap reached)")
    return {
        "success": True,
        "data": breakdown.model_dump(by_alias=True, mode="json"),
    }


@api_router.get("/pricing")
async def pricing_method_not_allowed(request: Request):
    """Pricing needs a request body; GET is rejected explicitly."""
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={
            "success": False,
            "message": Localizator.get_text(TextEntity.USER, "error_method_not_allowed", lang=request_language(request)),
        },
    )


@api_router.get("/active")
async def list_active_combos(session: AsyncSession = Depends(db_session)):
    """Active combos in registry order (priority DESC, newest first)."""
    combos = await ComboService.get_active_combos(session)
    return {
        "success": True,
        "data": {"combos": [combo.model_dump(by_alias=True, mode="json") for combo in combos]},
    }


@api_router.get("/categories")
async def list_categories(session: AsyncSession = Depends(db_session)):
    """Categories combo requirements can refer to (available products only)."""
    categories = await ComboService.get_categories(session)
    return {
        "success": True,
        "data": {"categories": categories},
    }


@api_router.post("/detect")
async def detect_combos(payload: CartPayload, session: AsyncSession = Depends(db_session)):
    """
    Detect combos applicable to a cart.

    Returns every active combo that fits the cart (evaluated on its own), the
    best standalone deal, and the optimal pricing across all combos.

    Returns:
        200: {"success": true, "data": {"applicableCombos": [...], "bestCombo": {...} | null,
              "optimalPricing": PricingBreakdown | null}}
    """
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] Combo detection request with {len(payload.items)} lines")

    applicable = await ComboService.get_applicable_combos(payload.items, session)
    best_combo = next((combo for combo in applicable if combo.is_better_deal), None)

    optimal_pricing = None
    if best_combo is not None:
        breakdown = await ComboService.get_pricing_breakdown(payload.items, session)
        optimal_pricing = breakdown.model_dump(by_alias=True, mode="json")

    return {
        "success": True,
        "data": {
            "applicableCombos": [combo.model_dump(by_alias=True, mode="json") for combo in applicable],
            "bestCombo": best_combo.model_dump(by_alias=True, mode="json") if best_combo else None,
            "optimalPricing": optimal_pricing,
        },
    }
