"""
Vehicle database model.

Vehicles carry trips and accumulate expenses (fuel, maintenance, permits...).
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from fleet_ledger.app.db.session import Base
from fleet_ledger.app.models.enums import VehicleStatus


class Vehicle(Base):
    """
    Vehicle model.

    Identified by its registration number. Profitability is derived from
    the trips it carries and the expenses tagged to it.
    """
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Vehicle identification
    vehicle_number = Column(String(50), unique=True, nullable=False, index=True)
    vehicle_type = Column(String(100), nullable=False, default="truck")  # e.g., "Truck", "Tempo", "Trailer"
    make = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    fuel_type = Column(String(50), nullable=True)

    # Status
    status = Column(Enum(VehicleStatus), default=VehicleStatus.ACTIVE, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, number='{self.vehicle_number}')>"
