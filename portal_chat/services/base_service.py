# portal_chat/services/base_service.py
"""Base service with common read operations."""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Type, Any, List, Iterable, TypeVar, Generic

# Define generic type
T = TypeVar('T')

class BaseService(Generic[T]):
    def __init__(self, model: Type[T], db: AsyncSession):
        self.model = model
        self.db = db

    async def get(self, id: Any):
        stmt = select(self.model).where(self.model.id == id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, ids: Iterable[Any]) -> List[T]:
        ids = list(ids)
        if not ids:
            return []
        stmt = select(self.model).where(self.model.id.in_(ids))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
