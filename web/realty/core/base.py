from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, Any, Dict, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase

from .exceptions import ConflictError, ValidationError

if TYPE_CHECKING:
    from .unit_of_work import UnitOfWork

ModelType = TypeVar('ModelType', bound=DeclarativeBase)

UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when *exc* comes from a unique index (PostgreSQL or SQLite)."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == UNIQUE_VIOLATION
    return "unique constraint" in str(orig).lower()


class IRepository(ABC, Generic[ModelType]):
    """Base repository interface"""

    @abstractmethod
    async def get(self, id: Any) -> Optional[ModelType]:
        """Get entity by ID"""
        pass

    @abstractmethod
    async def create(self, *, obj_in: Dict[str, Any]) -> ModelType:
        """Create new entity"""
        pass

    @abstractmethod
    async def update(self, *, id: Any, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """Update existing entity"""
        pass

    @abstractmethod
    async def count(self, *, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count entities"""
        pass


class BaseRepository(IRepository[ModelType], Generic[ModelType]):
    """Base repository implementation with common CRUD operations.

    Writes are flushed immediately so constraint violations surface inside
    the calling operation: unique indexes as :class:`ConflictError`, any
    other integrity failure (NOT NULL, foreign key) as :class:`ValidationError`.
    """

    entity_name: str = "Entity"

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> Optional[ModelType]:
        """Get entity by ID"""
        return await self.session.get(self.model, id)

    async def create(self, *, obj_in: Dict[str, Any]) -> ModelType:
        """Create new entity"""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self._flush()
        return db_obj

    async def update(self, *, id: Any, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """Update existing entity"""
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await self._flush()
        return db_obj

    async def delete(self, *, id: Any) -> bool:
        """Delete entity"""
        db_obj = await self.get(id)
        if not db_obj:
            return False

        await self.session.delete(db_obj)
        await self._flush()
        return True

    async def count(self, *, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count entities"""
        query = select(func.count()).select_from(self.model)

        if filters:
            for key, value in filters.items():
                if hasattr(self.model, key):
                    query = query.where(getattr(self.model, key) == value)

        result = await self.session.execute(query)
        return result.scalar() or 0

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise ConflictError(
                    f"{self.entity_name} violates a uniqueness constraint",
                    entity=self.entity_name,
                ) from exc
            raise ValidationError(
                f"{self.entity_name} is missing a required value or reference"
            ) from exc


class BaseService:
    """Base service holding the unit of work every operation runs in"""

    def __init__(self, uow: "UnitOfWork"):
        self.uow = uow
