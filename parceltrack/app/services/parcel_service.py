"""
Parcel lifecycle service.

Creates parcels under unique tracking IDs and moves them through their
lifecycle. Each transition updates the current status and appends one
history entry in a single commit, guarded by the parcel's version column.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from parceltrack.app.core.clock import utcnow
from parceltrack.app.core.config import Settings
from parceltrack.app.core.exceptions import ResourceNotFoundError, ValidationError
from parceltrack.app.domain.identifiers.allocator import allocate_unique_identifier
from parceltrack.app.domain.identifiers.generator import generate_tracking_id
from parceltrack.app.domain.parcels.lifecycle import (
    INITIAL_STATUS, check_cancellable, check_status_update, parse_status,
)
from parceltrack.app.domain.parcels.status_history import append_status_log, apply_transition, clean_note
from parceltrack.app.models.parcel import Parcel
from parceltrack.app.models.parcel_enums import ParcelStatus
from parceltrack.app.models.user import User
from parceltrack.app.repositories.parcel_repository import ParcelRepository
from parceltrack.app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

CREATION_NOTE = "Parcel created"
CANCELLATION_NOTE = "Cancelled by user"

DATE_RANGES = {"7d": 7, "30d": 30, "90d": 90}

SORTABLE_FIELDS = {
    "created_at": Parcel.created_at,
    "updated_at": Parcel.updated_at,
    "status": Parcel.status,
    "tracking_id": Parcel.tracking_id,
    "price": Parcel.price,
    "weight": Parcel.weight,
}

DEFAULT_SORT = "-created_at"


class ParcelFilters(BaseModel):
    """Listing filters; every field is optional."""
    status: Optional[str] = None
    sender_id: Optional[int] = None
    receiver_id: Optional[int] = None
    tracking_id: Optional[str] = None
    search: Optional[str] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    date_range: Optional[str] = None


def build_parcel_criteria(filters: ParcelFilters, now: Optional[datetime] = None) -> list:
    """
    Translate listing filters into SQLAlchemy criteria.
    
    Raises:
        ValidationError: Unknown status or date range
    """
    criteria = []
    
    if filters.status:
        criteria.append(Parcel.status == parse_status(filters.status))
    if filters.sender_id is not None:
        criteria.append(Parcel.sender_id == filters.sender_id)
    if filters.receiver_id is not None:
        criteria.append(Parcel.receiver_id == filters.receiver_id)
    if filters.tracking_id:
        criteria.append(Parcel.tracking_id == filters.tracking_id.strip())
    
    if filters.search and filters.search.strip():
        term = filters.search.strip()
        criteria.append(
            Parcel.origin.icontains(term, autoescape=True)
            | Parcel.destination.icontains(term, autoescape=True)
            | Parcel.tracking_id.icontains(term, autoescape=True)
        )
    
    if filters.from_date:
        criteria.append(Parcel.created_at >= filters.from_date)
    if filters.to_date:
        criteria.append(Parcel.created_at <= filters.to_date)
    
    if filters.date_range and filters.date_range != "all":
        days = DATE_RANGES.get(filters.date_range)
        if days is None:
            raise ValidationError(
                "Invalid date_range. Allowed: 7d, 30d, 90d, all",
                details={"date_range": filters.date_range},
            )
        start = (now or utcnow()).replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=days)
        criteria.append(Parcel.created_at >= start)
    
    return criteria


def parse_sort(sort: Optional[str]) -> tuple:
    """``-created_at`` style sort key to ORDER BY clauses (id breaks ties)."""
    sort = (sort or DEFAULT_SORT).strip()
    descending = sort.startswith("-")
    column = SORTABLE_FIELDS.get(sort.lstrip("-+"))
    if column is None:
        raise ValidationError(
            f"Invalid sort. Allowed: {', '.join(SORTABLE_FIELDS)} (prefix '-' for descending)",
            details={"sort": sort},
        )
    if descending:
        return column.desc(), Parcel.id.desc()
    return column.asc(), Parcel.id.asc()


class ParcelService:
    """Parcel operations bound to one database session."""
    
    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings
        self.parcels = ParcelRepository(db)
        self.users = UserRepository(db)
    
    def new_tracking_id(self) -> str:
        return generate_tracking_id(
            prefix=self.settings.tracking_id_prefix,
            length=self.settings.tracking_id_random_length,
        )
    
    async def resolve_receiver(self, receiver_id: Optional[int] = None, receiver_short_id: Optional[str] = None) -> User:
        """Look a receiver up by numeric ID or short ID."""
        if receiver_id is not None:
            receiver = await self.users.find_by_id(receiver_id)
        else:
            receiver = await self.users.find_by_short_id(receiver_short_id or "")
        if receiver is None:
            raise ResourceNotFoundError("Receiver", receiver_id or receiver_short_id)
        return receiver
    
    async def create_parcel(
        self,
        sender_id: int,
        receiver_id: int,
        origin: str,
        destination: str,
        weight: Optional[float] = None,
        price: Optional[float] = None,
        note: Optional[str] = None,
    ) -> Parcel:
        """
        Create a parcel in the initial status with one creation history entry.
        
        Raises:
            ValidationError: Missing origin/destination or negative amounts
            ResourceNotFoundError: Unknown receiver
            AllocationExhaustedError: No free tracking ID within the retry budget
        """
        origin = (origin or "").strip()
        destination = (destination or "").strip()
        if not origin or not destination:
            raise ValidationError("Missing required parcel fields", details={"required": ["origin", "destination"]})
        for field, value in (("weight", weight), ("price", price)):
            if value is not None and value < 0:
                raise ValidationError(f"{field} must not be negative", details={field: value})
        
        await self.resolve_receiver(receiver_id=receiver_id)
        creation_note = clean_note(note) or CREATION_NOTE
        
        async def create(tracking_id: str) -> Parcel:
            parcel = Parcel(
                tracking_id=tracking_id,
                sender_id=sender_id,
                receiver_id=receiver_id,
                origin=origin,
                destination=destination,
                weight=weight,
                price=price,
                status=INITIAL_STATUS,
                is_blocked=False,
            )
            append_status_log(parcel, INITIAL_STATUS, actor_id=sender_id, note=creation_note)
            return await self.parcels.create(parcel)
        
        parcel = await allocate_unique_identifier(
            self.new_tracking_id,
            create,
            max_attempts=self.settings.id_allocation_max_attempts,
            field="tracking_id",
        )
        logger.info("Parcel %s created by user %s for receiver %s", parcel.tracking_id, sender_id, receiver_id)
        return await self.get_parcel(parcel.id, refresh=True)
    
    async def get_parcel(self, parcel_id: int, refresh: bool = False) -> Parcel:
        parcel = await self.parcels.find_by_id(parcel_id, refresh=refresh)
        if parcel is None:
            raise ResourceNotFoundError("Parcel", parcel_id)
        return parcel
    
    async def get_parcel_by_tracking_id(self, tracking_id: str) -> Parcel:
        parcel = await self.parcels.find_by_tracking_id((tracking_id or "").strip())
        if parcel is None:
            raise ResourceNotFoundError("Parcel", tracking_id)
        return parcel
    
    async def list_parcels(
        self,
        filters: Optional[ParcelFilters] = None,
        page: int = 1,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> Tuple[List[Parcel], int]:
        """Return one page of parcels matching ``filters`` and the total match count."""
        limit = limit or self.settings.default_page_size
        if page < 1 or limit < 1 or limit > self.settings.max_page_size:
            raise ValidationError(
                f"page must be >= 1 and limit between 1 and {self.settings.max_page_size}",
                details={"page": page, "limit": limit},
            )
        criteria = build_parcel_criteria(filters or ParcelFilters())
        return await self.parcels.paginate(
            *criteria,
            order_by=parse_sort(sort),
            offset=(page - 1) * limit,
            limit=limit,
        )
    
    async def update_parcel_status(
        self,
        parcel_id: int,
        new_status: object,
        actor_id: Optional[int],
        note: Optional[str] = None,
    ) -> Parcel:
        """
        Set any canonical status and append the matching history entry.
        
        Raises:
            ValidationError: Unrecognized status (nothing is changed)
            ResourceNotFoundError: Unknown parcel
            ConcurrentUpdateError: The parcel changed since it was read
        """
        target = parse_status(new_status)
        parcel = await self.get_parcel(parcel_id)
        previous = parcel.status
        check_status_update(previous, target, parcel.tracking_id)
        
        apply_transition(parcel, target, actor_id=actor_id, note=clean_note(note))
        await self.parcels.save(parcel)
        
        logger.info("Parcel %s status %s -> %s by user %s", parcel.tracking_id, previous.value, target.value, actor_id)
        return await self.get_parcel(parcel_id, refresh=True)
    
    async def cancel_parcel(self, parcel_id: int, actor_id: Optional[int]) -> Parcel:
        """
        Cancel a parcel that has not been dispatched yet.
        
        Raises:
            ResourceNotFoundError: Unknown parcel
            DomainError: Already cancelled, or dispatched or later
            ConcurrentUpdateError: The parcel changed since it was read
        """
        parcel = await self.get_parcel(parcel_id)
        check_cancellable(parcel.status)
        
        apply_transition(parcel, ParcelStatus.CANCELLED, actor_id=actor_id, note=CANCELLATION_NOTE)
        await self.parcels.save(parcel)
        
        logger.info("Parcel %s cancelled by user %s", parcel.tracking_id, actor_id)
        return await self.get_parcel(parcel_id, refresh=True)
