"""
Trip-related enumerations.
"""

import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    CREATED = "created"  # Booked, nothing assigned yet
    ASSIGNED = "assigned"  # Vehicle/driver assigned, not started
    RUNNING = "running"  # On the road
    COMPLETED = "completed"  # Delivered and settled (terminal)
    CANCELLED = "cancelled"  # Abandoned (terminal)


class PaymentStatus(str, enum.Enum):
    """Client payment status for a trip."""
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"
