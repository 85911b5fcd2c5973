"""
Driver model carrying the driver's pay plan.
"""
from sqlalchemy import Column, String, Numeric, Integer
from sqlalchemy.orm import relationship
from tripsettle.db.base import BaseModel


class Driver(BaseModel):
    """Driver assigned to trips."""
    __tablename__ = "drivers"
    
    owner_id = Column(Integer, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    
    # Pay plan. pay_mode is validated upstream, so unknown values may be stored.
    pay_mode = Column(String(30), nullable=True)
    rate_per_mile = Column(Numeric(12, 4), nullable=True)
    rate_per_cuft = Column(Numeric(12, 4), nullable=True)
    percent_of_revenue = Column(Numeric(6, 2), nullable=True)  # 0-100
    flat_daily_rate = Column(Numeric(15, 2), nullable=True)
    
    # Relationships
    trips = relationship("Trip", back_populates="driver")
    
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
