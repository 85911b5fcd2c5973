"""
Trip model: one truck run carrying one or more loads.
"""
from sqlalchemy import Column, String, Date, Numeric, Enum as SQLEnum, ForeignKey, Integer
from sqlalchemy.orm import relationship
from tripsettle.db.base import BaseModel
import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"
    SETTLED = "settled"
    CANCELLED = "cancelled"


class Trip(BaseModel):
    """Trip model with odometer evidence and settlement summary fields."""
    __tablename__ = "trips"
    
    owner_id = Column(Integer, nullable=False, index=True)
    trip_number = Column(String(50), nullable=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=True, index=True)
    truck_id = Column(Integer, nullable=True)
    status = Column(SQLEnum(TripStatus), default=TripStatus.PLANNED, nullable=False)
    start_date = Column(Date, nullable=True, index=True)
    end_date = Column(Date, nullable=True, index=True)
    
    # Odometer readings and their supporting photos
    odometer_start = Column(Numeric(12, 1), nullable=True)
    odometer_end = Column(Numeric(12, 1), nullable=True)
    odometer_start_photo_url = Column(String(500), nullable=True)
    odometer_end_photo_url = Column(String(500), nullable=True)
    
    # Summary written by the settlement builder
    revenue_total = Column(Numeric(15, 2), nullable=True)
    driver_pay_total = Column(Numeric(15, 2), nullable=True)
    fuel_total = Column(Numeric(15, 2), nullable=True)
    tolls_total = Column(Numeric(15, 2), nullable=True)
    other_expenses_total = Column(Numeric(15, 2), nullable=True)
    profit_total = Column(Numeric(15, 2), nullable=True)
    actual_miles = Column(Numeric(12, 1), nullable=True)
    total_miles = Column(Numeric(12, 1), nullable=True)
    
    # Relationships
    driver = relationship("Driver", back_populates="trips")
    loads = relationship("Load", back_populates="trip", order_by="Load.id")
    expenses = relationship("TripExpense", back_populates="trip", cascade="all, delete-orphan",
                            order_by="TripExpense.id")
