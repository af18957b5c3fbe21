"""
Parcel database models.

A parcel owns an append-only, ordered list of status log entries. The
parcel's ``status`` column always mirrors the last entry.
"""

from sqlalchemy import (
    Column, Integer, String, Float, DateTime, ForeignKey, Enum, Boolean,
    UniqueConstraint, event,
)
from sqlalchemy.orm import relationship
from parceltrack.app.core.clock import utcnow
from parceltrack.app.db.session import Base
from parceltrack.app.models.parcel_enums import ParcelStatus


class Parcel(Base):
    """
    Parcel model.
    
    ``version`` is the optimistic-lock counter: every UPDATE is issued with
    ``WHERE version = <loaded version>`` and a stale write raises
    ``StaleDataError`` instead of silently overwriting.
    """
    __tablename__ = "parcels"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Immutable external identifier
    tracking_id = Column(String(32), unique=True, nullable=False, index=True)
    
    # Weak references to users (no cascading delete)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    weight = Column(Float, nullable=True)
    price = Column(Float, nullable=True)
    
    # Status
    status = Column(Enum(ParcelStatus), default=ParcelStatus.PENDING, nullable=False, index=True)
    is_blocked = Column(Boolean, default=False, nullable=False)
    version = Column(Integer, nullable=False)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    
    status_logs = relationship(
        "ParcelStatusLog",
        order_by="ParcelStatusLog.position",
        cascade="all, delete-orphan",
        lazy="selectin",
        back_populates="parcel",
    )
    sender = relationship("User", foreign_keys=[sender_id], lazy="selectin")
    receiver = relationship("User", foreign_keys=[receiver_id], lazy="selectin")
    
    __mapper_args__ = {"version_id_col": version}
    
    def __repr__(self):
        return f"<Parcel(id={self.id}, tracking_id='{self.tracking_id}', status='{self.status.value}')>"


class ParcelStatusLog(Base):
    """One immutable status change of a parcel."""
    __tablename__ = "parcel_status_logs"
    __table_args__ = (
        UniqueConstraint("parcel_id", "position", name="uq_parcel_status_logs_position"),
    )
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    parcel_id = Column(Integer, ForeignKey("parcels.id", ondelete="CASCADE"), nullable=False, index=True)
    
    # Zero-based insertion order within the parcel
    position = Column(Integer, nullable=False)
    status = Column(Enum(ParcelStatus), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    note = Column(String(500), nullable=True)
    
    parcel = relationship("Parcel", back_populates="status_logs")
    
    def __repr__(self):
        return f"<ParcelStatusLog(parcel_id={self.parcel_id}, position={self.position}, status='{self.status.value}')>"


@event.listens_for(ParcelStatusLog, "before_update")
def _reject_status_log_update(mapper, connection, target):
    raise ValueError("Parcel status log entries are immutable")
