from typing import Optional, List
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.base import BaseRepository
from ...models import Office, OfficeAgent


class OfficeRepository(BaseRepository[Office]):
    """Office store with membership helpers"""

    entity_name = "Office"

    def __init__(self, session: AsyncSession):
        super().__init__(Office, session)

    async def get_by_franchise_id(self, franchise_id: str) -> Optional[Office]:
        result = await self.session.execute(
            select(Office).where(Office.franchise_id == franchise_id.upper())
        )
        return result.scalar_one_or_none()

    async def list_agent_ids(self, office_id: int) -> List[int]:
        result = await self.session.execute(
            select(OfficeAgent.agent_id)
            .where(OfficeAgent.office_id == office_id)
            .order_by(OfficeAgent.added_at, OfficeAgent.agent_id)
        )
        return list(result.scalars().all())

    async def add_agent(self, office_id: int, agent_id: int) -> bool:
        """Add *agent_id* to the office; returns False when already a member"""
        existing = await self.session.get(OfficeAgent, (office_id, agent_id))
        if existing:
            return False
        self.session.add(OfficeAgent(office_id=office_id, agent_id=agent_id))
        await self._flush()
        return True

    async def count_agents(self, office_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(OfficeAgent).where(OfficeAgent.office_id == office_id)
        )
        return result.scalar() or 0
