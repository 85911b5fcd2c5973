"""
Trip expense model for fuel, tolls and other costs.
"""
from sqlalchemy import Column, String, Numeric, Date, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from tripsettle.db.base import BaseModel


class TripExpense(BaseModel):
    """Expense recorded against a trip."""
    __tablename__ = "trip_expenses"
    
    owner_id = Column(Integer, nullable=False, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    category = Column(String(50), nullable=False)  # fuel, tolls, driver_pay, lodging, ...
    description = Column(Text, nullable=True)
    amount = Column(Numeric(15, 2), nullable=False)
    paid_by = Column(String(30), nullable=True)  # company_card, fuel_card, driver_personal, driver_cash
    incurred_on = Column(Date, nullable=True)
    
    # Relationships
    trip = relationship("Trip", back_populates="expenses")
