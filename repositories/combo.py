from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.combo import Combo, ComboCategoryRequirement, ComboDTO


class ComboRepository:
    """Read access to the combo registry (plus inserts for seeding)."""

    @staticmethod
    async def get_active(session: Session | AsyncSession) -> list[ComboDTO]:
        """
        Get all active combos in registry order.

        Registry order is priority DESC, then newest first. The pricing engine
        uses this order as its final tie-break, so it must be stable.

        Args:
            session: Database session

        Returns:
            List of ComboDTO with their category requirements
        """
        stmt = (
            select(Combo)
            .where(Combo.is_active == True)
            .order_by(Combo.priority.desc(), Combo.created_at.desc(), Combo.id.asc())
        )
        result = await session_execute(stmt, session)
        combos = result.scalars().all()
        return [ComboDTO.model_validate(combo, from_attributes=True) for combo in combos]

    @staticmethod
    async def get_by_id(
        combo_id: str,
        session: Session | AsyncSession
    ) -> ComboDTO | None:
        stmt = select(Combo).where(Combo.id == combo_id)
        result = await session_execute(stmt, session)
        combo = result.scalar()

        if combo is None:
            return None

        return ComboDTO.model_validate(combo, from_attributes=True)

    @staticmethod
    async def add(combo_dto: ComboDTO, session: Session | AsyncSession) -> ComboDTO:
        """
        Insert a combo together with its category requirements.

        Example:
            await ComboRepository.add(ComboDTO(
                name="Combo no bụng",
                price=60000,
                category_requirements=[
                    CategoryRequirementDTO(category="Đồ ăn", quantity=2),
                    CategoryRequirementDTO(category="Đồ uống", quantity=1),
                ],
            ), session)
        """
        combo = Combo(**combo_dto.model_dump(exclude_none=True, exclude={'category_requirements'}))
        combo.category_requirements = [
            ComboCategoryRequirement(category=requirement.category, quantity=requirement.quantity)
            for requirement in combo_dto.category_requirements
        ]
        session.add(combo)
        await session_flush(session)
        return ComboDTO.model_validate(combo, from_attributes=True)
