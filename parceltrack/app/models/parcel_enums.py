"""
Parcel Status Enumeration.
"""

import enum


class ParcelStatus(str, enum.Enum):
    """
    Parcel status enumeration, in normal progression order.
    
    Status flow:
        PENDING → COLLECTED → DISPATCHED → IN_TRANSIT → DELIVERED
        PENDING / COLLECTED can transition to CANCELLED
    """
    PENDING = "pending"
    COLLECTED = "collected"
    DISPATCHED = "dispatched"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
