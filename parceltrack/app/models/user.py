"""
User database model.

This module defines the User SQLAlchemy model for authentication.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from parceltrack.app.core.clock import utcnow
from parceltrack.app.db.session import Base
from parceltrack.app.models.enums import UserRole


class User(Base):
    """
    User model for authentication and user management.
    
    Email is stored lower-cased so the unique index is case-insensitive in
    practice. ``short_id`` is an optional 8-character alias usable for login
    and receiver lookup.
    """
    __tablename__ = "users"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), default=UserRole.SENDER, nullable=False)
    short_id = Column(String(16), unique=True, index=True, nullable=True)
    is_blocked = Column(Boolean, default=False, nullable=False)
    
    # Contact fields
    phone = Column(String(32), nullable=True)
    address = Column(String(255), nullable=True)
    
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    
    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', short_id='{self.short_id}', role='{self.role.value}')>"
