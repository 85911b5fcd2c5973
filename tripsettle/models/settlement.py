"""
Settlement models: the persisted financial closure of a trip.
"""
from sqlalchemy import (
    Column, String, Numeric, Date, DateTime, Text, ForeignKey, Integer, Enum as SQLEnum, UniqueConstraint
)
from sqlalchemy.orm import relationship
from tripsettle.db.base import BaseModel
import enum


class SettlementStatus(str, enum.Enum):
    """Settlement lifecycle."""
    DRAFT = "draft"
    SETTLED = "settled"


class LineItemCategory(str, enum.Enum):
    """Closed set of settlement line item categories."""
    REVENUE = "revenue"
    DRIVER_PAY = "driver_pay"
    FUEL = "fuel"
    TOLLS = "tolls"
    EXPENSE = "expense"
    REIMBURSEMENT = "reimbursement"


class ReceivableStatus(str, enum.Enum):
    OPEN = "open"
    PAID = "paid"
    PARTIAL = "partial"
    CANCELLED = "cancelled"


class PayableStatus(str, enum.Enum):
    OPEN = "open"
    PAID = "paid"
    CANCELLED = "cancelled"


class TripSettlement(BaseModel):
    """Settlement header. At most one per trip."""
    __tablename__ = "trip_settlements"
    __table_args__ = (UniqueConstraint("trip_id", name="uq_trip_settlements_trip_id"),)
    
    owner_id = Column(Integer, nullable=False, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=True)
    truck_id = Column(Integer, nullable=True)
    total_revenue = Column(Numeric(15, 2), nullable=False)
    total_driver_pay = Column(Numeric(15, 2), nullable=False)
    total_expenses = Column(Numeric(15, 2), nullable=False)
    total_profit = Column(Numeric(15, 2), nullable=False)
    status = Column(SQLEnum(SettlementStatus), default=SettlementStatus.DRAFT, nullable=False)
    closed_at = Column(DateTime, nullable=True)
    
    # Relationships
    trip = relationship("Trip")
    driver = relationship("Driver")
    line_items = relationship("SettlementLineItem", back_populates="settlement",
                              order_by="SettlementLineItem.id")
    receivables = relationship("Receivable", back_populates="settlement", order_by="Receivable.id")
    payables = relationship("Payable", back_populates="settlement", order_by="Payable.id")


class SettlementLineItem(BaseModel):
    """One categorized amount inside a settlement."""
    __tablename__ = "settlement_line_items"
    
    owner_id = Column(Integer, nullable=False, index=True)
    settlement_id = Column(Integer, ForeignKey("trip_settlements.id"), nullable=False, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    load_id = Column(Integer, ForeignKey("loads.id"), nullable=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=True)
    category = Column(SQLEnum(LineItemCategory), nullable=False)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    
    # Relationships
    settlement = relationship("TripSettlement", back_populates="line_items")


class Receivable(BaseModel):
    """Money a shipping company owes the carrier after a trip."""
    __tablename__ = "receivables"
    
    owner_id = Column(Integer, nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    settlement_id = Column(Integer, ForeignKey("trip_settlements.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    status = Column(SQLEnum(ReceivableStatus), default=ReceivableStatus.OPEN, nullable=False)
    due_date = Column(Date, nullable=True)
    
    # Relationships
    settlement = relationship("TripSettlement", back_populates="receivables")
    company = relationship("Company")


class Payable(BaseModel):
    """Money the carrier owes a driver after a trip."""
    __tablename__ = "payables"
    
    owner_id = Column(Integer, nullable=False, index=True)
    payee_type = Column(String(20), default="driver", nullable=False)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    settlement_id = Column(Integer, ForeignKey("trip_settlements.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    status = Column(SQLEnum(PayableStatus), default=PayableStatus.OPEN, nullable=False)
    notes = Column(Text, nullable=True)
    
    # Relationships
    settlement = relationship("TripSettlement", back_populates="payables")
    driver = relationship("Driver")
