"""
Base repository pattern implementation with async support
"""
from typing import Any, Generic, Optional, Type, TypeVar

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from taxoai.core.logging import log


ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository for data access with async support.

    Writes are flushed, not committed: the surrounding session scope
    (see DatabaseSessionManager.session) owns the transaction.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> Optional[ModelType]:
        """Get a record by primary key"""
        if id is None:
            return None
        return await self.session.get(self.model, id)

    async def add(self, db_obj: ModelType) -> ModelType:
        """Add (or re-add) an instance and flush it"""
        self.session.add(db_obj)
        await self.session.flush()
        return db_obj

    async def create(self, **fields) -> ModelType:
        """Create a new record"""
        db_obj = await self.add(self.model(**fields))
        log.debug(f"Created {self.model.__name__}")
        return db_obj

    async def delete(self, db_obj: ModelType) -> None:
        await self.session.delete(db_obj)
        await self.session.flush()
