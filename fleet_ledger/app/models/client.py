"""
Client database model.

Clients are billed for the trips booked against them.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from fleet_ledger.app.db.session import Base


class Client(Base):
    """
    Client model.

    Holds the contact and tax details a bill document needs.
    """
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(150), nullable=False, index=True)
    company_name = Column(String(200), nullable=True)
    gst_number = Column(String(30), nullable=True)
    address = Column(Text, nullable=True)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Client(id={self.id}, name='{self.name}')>"
