from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import InternalError
from ..infrastructure.repositories import (
    UserRepository,
    AgentProfileRepository,
    OfficeRepository,
    PropertyRepository,
    SavedSearchRepository,
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Unit of work for managing repository instances and transactions.

    Multi-entity operations run inside ``async with uow:`` and finish with
    ``await uow.commit()``. Leaving the block with an exception rolls every
    write back; raw storage failures are re-raised as :class:`InternalError`
    while application errors propagate with their own kind.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.agents = AgentProfileRepository(session)
        self.offices = OfficeRepository(session)
        self.properties = PropertyRepository(session)
        self.saved_searches = SavedSearchRepository(session)

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            return False
        await self.rollback()
        if isinstance(exc_val, SQLAlchemyError):
            logger.exception("Storage failure, transaction rolled back")
            raise InternalError("Storage failure") from exc_val
        return False

    async def commit(self):
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.rollback()
            raise InternalError("Storage failure") from exc

    async def rollback(self):
        await self.session.rollback()


@asynccontextmanager
async def get_uow(session: AsyncSession) -> AsyncGenerator[UnitOfWork, None]:
    """Get unit of work instance."""
    uow = UnitOfWork(session)
    try:
        yield uow
    except Exception:
        await uow.rollback()
        raise
