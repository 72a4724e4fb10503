from datetime import datetime
from typing import Optional, List
from sqlalchemy import select, func, extract
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.base import BaseRepository
from ...models import Property
from ...roles import PropertyStatus


class PropertyRepository(BaseRepository[Property]):
    """Property store"""

    entity_name = "Property"

    def __init__(self, session: AsyncSession):
        super().__init__(Property, session)

    async def get_many(self, property_ids: List[int]) -> List[Property]:
        if not property_ids:
            return []
        result = await self.session.execute(select(Property).where(Property.id.in_(property_ids)))
        return list(result.scalars().all())

    async def count_active_for_office(self, office_id: int) -> int:
        query = select(func.count()).select_from(Property).where(
            Property.listing_office_id == office_id,
            Property.status == PropertyStatus.active.value,
        )
        return (await self.session.execute(query)).scalar() or 0

    async def sold_for_office(self, office_id: int, year: Optional[int] = None) -> List[Property]:
        """Properties of the office sold in *year* (defaults to the current year)"""
        year = year or datetime.utcnow().year
        query = select(Property).where(
            Property.listing_office_id == office_id,
            Property.status == PropertyStatus.sold.value,
            extract("year", Property.sold_at) == year,
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_for_agent(self, agent_id: int, status: Optional[str] = None) -> int:
        query = select(func.count()).select_from(Property).where(Property.listing_agent_id == agent_id)
        if status:
            query = query.where(Property.status == status)
        return (await self.session.execute(query)).scalar() or 0
