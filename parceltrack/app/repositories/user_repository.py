"""
User persistence.
"""

from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from parceltrack.app.models.user import User
from parceltrack.app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    unique_fields = ("email", "short_id")
    
    def __init__(self, db: AsyncSession):
        super().__init__(User, db)
    
    async def find_by_email(self, email: str) -> Optional[User]:
        if not email:
            return None
        return await self.find_one(User.email == email.strip().lower())
    
    async def find_by_short_id(self, short_id: str) -> Optional[User]:
        if not short_id:
            return None
        return await self.find_one(User.short_id == short_id.strip())
    
    async def short_id_exists(self, short_id: str) -> bool:
        return await self.count(User.short_id == short_id) > 0
    
    async def search(self, q: Optional[str], offset: int, limit: int) -> Tuple[List[User], int]:
        """Page through users, optionally matching ``q`` against name, email or phone."""
        criteria = []
        if q:
            term = q.strip()
            criteria.append(or_(
                User.name.icontains(term, autoescape=True),
                User.email.icontains(term, autoescape=True),
                User.phone.icontains(term, autoescape=True),
            ))
        return await self.paginate(
            *criteria,
            order_by=(User.created_at.desc(), User.id.desc()),
            offset=offset,
            limit=limit,
        )
