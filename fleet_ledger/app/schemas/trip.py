"""
Trip schemas: creation, status changes and the completion workflow.
"""

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from fleet_ledger.app.models.trip_enums import TripStatus, PaymentStatus


class TripCreate(BaseModel):
    """
    Schema for booking a trip.

    When both coordinate pairs are given and distance_km is omitted, the
    great-circle distance is filled in.
    """
    pickup_location: str = Field(..., min_length=1, max_length=255)
    drop_location: str = Field(..., min_length=1, max_length=255)
    pickup_lat: Optional[float] = Field(None, ge=-90, le=90)
    pickup_lng: Optional[float] = Field(None, ge=-180, le=180)
    drop_lat: Optional[float] = Field(None, ge=-90, le=90)
    drop_lng: Optional[float] = Field(None, ge=-180, le=180)
    distance_km: Optional[float] = None
    goods_type: Optional[str] = None
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
    client_id: Optional[int] = None
    fare_amount: float = 0
    advance_amount: float = 0
    start_date: Optional[dt.datetime] = None
    notes: Optional[str] = None


class TripResponse(BaseModel):
    id: int
    trip_number: str
    status: TripStatus
    payment_status: PaymentStatus
    pickup_location: str
    drop_location: str
    distance_km: Optional[float]
    vehicle_id: Optional[int]
    driver_id: Optional[int]
    client_id: Optional[int]
    fare_amount: float
    advance_amount: float
    start_date: Optional[dt.datetime]
    end_date: Optional[dt.datetime]

    class Config:
        from_attributes = True


class TripStatusUpdate(BaseModel):
    """Requested status change (completion goes through /complete)."""
    status: TripStatus


class CompletionExpenses(BaseModel):
    """Trip-end costs entered by the operator."""
    fuel: float = 0
    toll: float = 0
    other: float = 0


class CompletionPreview(BaseModel):
    """Net profit the operator sees before committing completion."""
    trip_id: int
    fare_amount: float
    total_expenses: float
    net_profit: float


StepStatus = Literal["committed", "failed", "skipped", "not_attempted"]


class StepOutcome(BaseModel):
    """Outcome of one completion step."""
    name: str
    status: StepStatus
    record_id: Optional[int] = None
    amount: Optional[float] = None
    error: Optional[str] = None


class CompletionResult(BaseModel):
    """
    Result of the trip completion workflow.

    Steps are listed in execution order; `success` is true only when every
    applicable step committed.
    """
    trip_id: int
    success: bool
    status: TripStatus
    end_date: Optional[dt.datetime] = None
    net_profit: float
    income_id: Optional[int] = None
    expense_ids: List[int] = []
    steps: List[StepOutcome]
