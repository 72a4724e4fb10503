from typing import Annotated, AsyncGenerator
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .infrastructure import get_session
from .core.unit_of_work import UnitOfWork, get_uow

# Type alias for dependency injection
SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_unit_of_work(session: SessionDep) -> AsyncGenerator[UnitOfWork, None]:
    """Request-scoped unit of work bound to the request session"""
    async with get_uow(session) as uow:
        yield uow


UowDep = Annotated[UnitOfWork, Depends(get_unit_of_work)]
