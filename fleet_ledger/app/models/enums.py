"""
Fleet enumerations.
"""

import enum


class VehicleStatus(str, enum.Enum):
    """
    Vehicle status enumeration.

    Only ACTIVE vehicles count towards the dashboard's active fleet.
    """
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"
