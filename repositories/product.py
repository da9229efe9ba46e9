from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.product import Product, ProductDTO


class ProductRepository:
    """Read access to the product catalog (plus inserts for seeding)."""

    @staticmethod
    async def get_by_id(
        product_id: str,
        session: Session | AsyncSession
    ) -> ProductDTO | None:
        """
        Get a single product by ID.

        Args:
            product_id: ID of the product
            session: Database session

        Returns:
            ProductDTO if found, None otherwise
        """
        stmt = select(Product).where(Product.id == product_id)
        result = await session_execute(stmt, session)
        product = result.scalar()

        if product is None:
            return None

        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def get_by_ids(
        product_ids: list[str],
        session: Session | AsyncSession
    ) -> dict[str, ProductDTO]:
        """
        Batch-load products for a cart (prevents N+1 queries).

        Unknown IDs are simply missing from the result; the pricing engine
        decides how to report them.

        Args:
            product_ids: List of product IDs (duplicates allowed)
            session: Database session

        Returns:
            Dict mapping product_id to ProductDTO
        """
        if not product_ids:
            return {}

        stmt = select(Product).where(Product.id.in_(set(product_ids)))
        result = await session_execute(stmt, session)
        products = result.scalars().all()
        return {
            product.id: ProductDTO.model_validate(product, from_attributes=True)
            for product in products
        }

    @staticmethod
    async def get_categories(session: Session | AsyncSession) -> list[str]:
        """Distinct categories of available products, alphabetically."""
        stmt = (
            select(Product.category)
            .where(Product.available == True)
            .distinct()
            .order_by(Product.category.asc())
        )
        result = await session_execute(stmt, session)
        return list(result.scalars().all())

    @staticmethod
    async def add(product_dto: ProductDTO, session: Session | AsyncSession) -> ProductDTO:
        product = Product(**product_dto.model_dump(exclude_none=True))
        session.add(product)
        await session_flush(session)
        return ProductDTO.model_validate(product, from_attributes=True)
