"""
Trip database model.

A trip moves goods for a client with one vehicle and one driver.
"""

from sqlalchemy import Column, Integer, String, Float, Text, ForeignKey, DateTime, Enum
from sqlalchemy.sql import func
from fleet_ledger.app.db.session import Base
from fleet_ledger.app.models.trip_enums import TripStatus, PaymentStatus


class Trip(Base):
    """
    Trip model.

    Status follows created -> assigned -> running -> completed, with
    cancellation allowed from any non-terminal state. end_date is only
    set once the trip is completed.
    """
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    trip_number = Column(String(30), nullable=False, default="", index=True)

    # Assignment
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=True, index=True)
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=True, index=True)
    client_id = Column(Integer, ForeignKey('clients.id'), nullable=True, index=True)

    # Route
    pickup_location = Column(String(255), nullable=False)
    drop_location = Column(String(255), nullable=False)
    pickup_lat = Column(Float, nullable=True)
    pickup_lng = Column(Float, nullable=True)
    drop_lat = Column(Float, nullable=True)
    drop_lng = Column(Float, nullable=True)
    distance_km = Column(Float, nullable=True)
    goods_type = Column(String(100), nullable=True)

    # Status
    status = Column(Enum(TripStatus), default=TripStatus.CREATED, nullable=False, index=True)

    # Financials
    fare_amount = Column(Float, nullable=False, default=0)
    advance_amount = Column(Float, nullable=False, default=0)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)

    notes = Column(Text, nullable=True)

    # Timestamps
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Trip(id={self.id}, number='{self.trip_number}', status='{self.status.value}')>"
