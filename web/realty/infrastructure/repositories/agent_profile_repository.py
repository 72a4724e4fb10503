from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.base import BaseRepository
from ...models import AgentProfile, User
from ...roles import VerificationStatus


class AgentProfileRepository(BaseRepository[AgentProfile]):
    """Agent profile store; ``user_id`` is unique so a second profile for the
    same account fails at flush with a conflict."""

    entity_name = "AgentProfile"

    def __init__(self, session: AsyncSession):
        super().__init__(AgentProfile, session)

    async def get_by_user_id(self, user_id: int) -> Optional[AgentProfile]:
        """Get agent profile by owning user ID"""
        result = await self.session.execute(
            select(AgentProfile).where(AgentProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_many(self, agent_ids: List[int]) -> List[AgentProfile]:
        if not agent_ids:
            return []
        result = await self.session.execute(
            select(AgentProfile).where(AgentProfile.id.in_(agent_ids))
        )
        return list(result.scalars().all())

    async def get_by_office(self, office_id: int) -> List[AgentProfile]:
        """Profiles linked to *office_id* through their own office reference"""
        result = await self.session.execute(
            select(AgentProfile).where(AgentProfile.office_id == office_id)
        )
        return list(result.scalars().all())

    async def list_pending(self, *, skip: int = 0, limit: int = 50) -> List[tuple[AgentProfile, User]]:
        """Inactive profiles whose owners await verification, oldest first"""
        query = (
            select(AgentProfile, User)
            .join(User, User.id == AgentProfile.user_id)
            .where(
                AgentProfile.is_active.is_(False),
                User.agent_verification_status == VerificationStatus.pending.value,
            )
            .order_by(AgentProfile.created_at)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [(row[0], row[1]) for row in result.all()]
