from typing import Optional, List
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.base import BaseRepository
from ...models import User, FavoriteProperty


class UserRepository(BaseRepository[User]):
    """User repository implementation"""

    entity_name = "User"

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        query = select(User).where(User.email == email.lower())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        """Check if user exists by email"""
        query = select(User.id).where(User.email == email.lower())
        result = await self.session.execute(query)
        return result.scalar() is not None

    async def get_by_reset_token(self, token_hash: str) -> Optional[User]:
        query = select(User).where(User.password_reset_token == token_hash)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_office(self, office_id: int) -> List[User]:
        """Accounts whose office reference points at *office_id*"""
        result = await self.session.execute(select(User).where(User.office_id == office_id))
        return list(result.scalars().all())

    # ---- favorites ----
    async def list_favorite_ids(self, user_id: int) -> List[int]:
        query = (
            select(FavoriteProperty.property_id)
            .where(FavoriteProperty.user_id == user_id)
            .order_by(FavoriteProperty.added_at)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_favorite(self, user_id: int, property_id: int) -> Optional[FavoriteProperty]:
        return await self.session.get(FavoriteProperty, (user_id, property_id))

    async def add_favorite(self, user_id: int, property_id: int) -> FavoriteProperty:
        favorite = FavoriteProperty(user_id=user_id, property_id=property_id)
        self.session.add(favorite)
        await self._flush()
        return favorite

    async def remove_favorite(self, favorite: FavoriteProperty) -> None:
        await self.session.delete(favorite)
        await self._flush()

    async def count_favorites(self, user_id: int) -> int:
        query = select(func.count()).select_from(FavoriteProperty).where(FavoriteProperty.user_id == user_id)
        return (await self.session.execute(query)).scalar() or 0

