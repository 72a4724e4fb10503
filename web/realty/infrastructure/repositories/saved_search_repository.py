from typing import List
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.base import BaseRepository
from ...models import SavedSearch


class SavedSearchRepository(BaseRepository[SavedSearch]):
    entity_name = "SavedSearch"

    def __init__(self, session: AsyncSession):
        super().__init__(SavedSearch, session)

    async def list_for_user(self, user_id: int) -> List[SavedSearch]:
        result = await self.session.execute(
            select(SavedSearch)
            .where(SavedSearch.user_id == user_id)
            .order_by(SavedSearch.created_at, SavedSearch.id)
        )
        return list(result.scalars().all())

    async def count_for_user(self, user_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(SavedSearch).where(SavedSearch.user_id == user_id)
        )
        return result.scalar() or 0
