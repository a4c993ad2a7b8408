"""
Billing Schemas.
"""

import datetime as dt
from pydantic import BaseModel
from typing import Optional, List


class BilledTrip(BaseModel):
    """A trip line on a client bill."""
    id: int
    trip_number: str
    pickup_location: str
    drop_location: str
    start_date: Optional[dt.datetime] = None
    status: str
    fare_amount: float

    class Config:
        from_attributes = True


class ClientBill(BaseModel):
    """Derived per-client bill. balance is always total_fare - total_paid."""
    client_id: int
    client_name: str
    company_name: Optional[str] = None
    gst_number: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    trips: List[BilledTrip]
    total_fare: float
    total_paid: float
    total_expenses: float
    balance: float


class BillingSummary(BaseModel):
    """Totals across every client bill, regardless of any active filter."""
    total_billed: float
    total_received: float
    total_pending: float


class BillDocument(BaseModel):
    """Data handed to a bill formatter (print, HTML or plain text)."""
    client_id: int
    client_name: str
    company_name: Optional[str] = None
    gst_number: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    trips: List[BilledTrip]
    total_fare: float
    total_paid: float
    balance: float
    issued_on: dt.date
