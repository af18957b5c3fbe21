"""
Parcel persistence.
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parceltrack.app.models.parcel import Parcel
from parceltrack.app.models.parcel_enums import ParcelStatus
from parceltrack.app.repositories.base import BaseRepository


class ParcelRepository(BaseRepository[Parcel]):
    unique_fields = ("tracking_id",)
    
    def __init__(self, db: AsyncSession):
        super().__init__(Parcel, db)
    
    async def find_by_tracking_id(self, tracking_id: str) -> Optional[Parcel]:
        return await self.find_one(Parcel.tracking_id == tracking_id)
    
    async def status_counts(self) -> Dict[ParcelStatus, int]:
        query = select(Parcel.status, func.count(Parcel.id)).group_by(Parcel.status)
        rows = (await self.db.execute(query)).all()
        return {status: count for status, count in rows}
    
    async def created_since(self, start: datetime) -> List[datetime]:
        query = select(Parcel.created_at).where(Parcel.created_at >= start)
        return list((await self.db.execute(query)).scalars().all())
    
    async def for_receiver(self, receiver_id: int) -> List[Parcel]:
        query = select(Parcel).where(Parcel.receiver_id == receiver_id)
        return list((await self.db.execute(query)).scalars().all())
