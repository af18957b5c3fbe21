"""
Parcel Pydantic schemas.

Defines request and response models for parcel management.
"""

from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional, List
from parceltrack.app.models.parcel_enums import ParcelStatus
from parceltrack.app.schemas.common import PaginationMeta


class ParcelCreate(BaseModel):
    """
    Schema for creating a new parcel.
    
    The receiver is given either by numeric ID or by short ID.
    """
    receiver_id: Optional[int] = Field(None, description="Receiver user ID")
    receiver_short_id: Optional[str] = Field(None, max_length=16, description="Receiver short ID")
    origin: str = Field(..., min_length=1, max_length=255)
    destination: str = Field(..., min_length=1, max_length=255)
    weight: Optional[float] = Field(None, ge=0, description="Weight in kilograms")
    price: Optional[float] = Field(None, ge=0)
    note: Optional[str] = Field(None, max_length=500)
    
    @model_validator(mode="after")
    def check_receiver_reference(self):
        if (self.receiver_id is None) == (not self.receiver_short_id):
            raise ValueError("Provide exactly one of receiver_id or receiver_short_id")
        return self


class StatusUpdateRequest(BaseModel):
    """Requested status (case-insensitive) and an optional note."""
    status: str = Field(..., description="Target status, e.g. 'in_transit'")
    note: Optional[str] = Field(None, max_length=500)


class StatusLogResponse(BaseModel):
    status: ParcelStatus
    timestamp: datetime
    actor_id: Optional[int] = None
    note: Optional[str] = None
    
    class Config:
        from_attributes = True


class ParcelParty(BaseModel):
    """Sender / receiver details embedded in parcel responses."""
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    short_id: Optional[str] = None
    
    class Config:
        from_attributes = True


class ParcelResponse(BaseModel):
    """Schema for parcel response."""
    id: int
    tracking_id: str
    sender_id: int
    receiver_id: int
    sender: Optional[ParcelParty] = None
    receiver: Optional[ParcelParty] = None
    origin: str
    destination: str
    weight: Optional[float] = None
    price: Optional[float] = None
    status: ParcelStatus
    status_logs: List[StatusLogResponse]
    is_blocked: bool
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class ParcelListResponse(BaseModel):
    """Schema for paginated parcel list."""
    items: List[ParcelResponse]
    meta: PaginationMeta
