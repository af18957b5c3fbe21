"""
User roles enumeration.

Defines the role types for the parcel tracking system.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.
    
    Roles:
        SENDER: Creates parcels and may cancel them before dispatch (default role)
        RECEIVER: Receives parcels, confirms delivery
        ADMIN: Supreme user with system-level access
        DELIVERY: Courier staff moving parcels through their lifecycle
    """
    SENDER = "sender"
    RECEIVER = "receiver"
    ADMIN = "admin"
    DELIVERY = "delivery"
