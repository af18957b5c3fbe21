"""
Base repository with generic async CRUD operations.

Concrete repositories declare ``unique_fields``: a unique-constraint
failure on one of them surfaces as DuplicateIdentifierError so callers can
retry with a new candidate. Every other integrity failure is re-raised
unchanged.
"""

from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from parceltrack.app.core.exceptions import ConcurrentUpdateError, DuplicateIdentifierError
from parceltrack.app.db.session import Base

ModelType = TypeVar("ModelType", bound=Base)


def unique_violation_field(exc: IntegrityError, table: str, fields: Sequence[str]) -> Optional[str]:
    """
    Name the designated field an IntegrityError is about, if any.
    
    Recognises SQLite (``UNIQUE constraint failed: users.email``) and
    PostgreSQL (``... unique constraint "ix_users_email"`` /
    ``Key (email)=...``) messages.
    """
    message = str(getattr(exc, "orig", exc)).lower()
    if "unique" not in message and "duplicate" not in message:
        return None
    for field in fields:
        needles = (f"{table}.{field}", f"{table}_{field}", f"({field})")
        if any(needle in message for needle in needles):
            return field
    return None


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository.
    
    Example:
        class UserRepository(BaseRepository[User]):
            unique_fields = ("email", "short_id")
            
            def __init__(self, db: AsyncSession):
                super().__init__(User, db)
    """
    
    unique_fields: Tuple[str, ...] = ()
    
    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db
    
    async def find_by_id(self, id: int, refresh: bool = False) -> Optional[ModelType]:
        """
        Get a single record by primary key.
        
        Args:
            id: Primary key value
            refresh: Re-read the row (and its eager relationships) even if
                the instance is already in the session
        """
        query = select(self.model).where(self.model.id == id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
    
    async def find_one(self, *criteria, **filters: Any) -> Optional[ModelType]:
        query = select(self.model).where(*criteria).filter_by(**filters).limit(1)
        result = await self.db.execute(query)
        return result.scalars().first()
    
    async def count(self, *criteria) -> int:
        query = select(func.count(self.model.id)).where(*criteria)
        return (await self.db.execute(query)).scalar() or 0
    
    async def paginate(
        self,
        *criteria,
        order_by: Sequence = (),
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[ModelType], int]:
        """Return one page of matching records plus the total match count."""
        total = await self.count(*criteria)
        query = select(self.model).where(*criteria).order_by(*order_by).offset(offset).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total
    
    async def create(self, obj: ModelType) -> ModelType:
        """
        Persist a new record in its own transaction.
        
        Raises:
            DuplicateIdentifierError: A designated unique field collided
            IntegrityError: Any other constraint violation
        """
        self.db.add(obj)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            field = unique_violation_field(exc, self.model.__tablename__, self.unique_fields)
            if field is None:
                raise
            raise DuplicateIdentifierError(field, getattr(obj, field, None)) from exc
        return obj
    
    async def update(self, obj: ModelType, patch: Dict[str, Any]) -> ModelType:
        for field, value in patch.items():
            setattr(obj, field, value)
        return await self.save(obj)
    
    async def save(self, obj: ModelType) -> ModelType:
        """
        Commit pending changes on ``obj`` as one unit.
        
        Raises:
            ConcurrentUpdateError: The row's version moved on since it was loaded
        """
        obj_id = obj.id
        try:
            await self.db.commit()
        except StaleDataError as exc:
            await self.db.rollback()
            raise ConcurrentUpdateError(self.model.__name__, obj_id) from exc
        return obj
