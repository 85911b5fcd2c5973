"""
Load model: one customer shipment with its contract terms and collections.
"""
from sqlalchemy import Column, String, Numeric, Boolean, ForeignKey, Integer
from sqlalchemy.orm import relationship
from tripsettle.db.base import BaseModel


class Load(BaseModel):
    """Load model representing a single shipment on a trip."""
    __tablename__ = "loads"
    
    owner_id = Column(Integer, nullable=False, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)
    load_number = Column(String(50), nullable=True)
    
    # Volume and rate
    actual_cuft_loaded = Column(Numeric(12, 2), nullable=True)
    rate_per_cuft = Column(Numeric(12, 4), nullable=True)  # List rate
    contract_rate_per_cuft = Column(Numeric(12, 4), nullable=True)  # Preferred when set
    
    # Contract accessorials (agreed at booking)
    contract_accessorials_stairs = Column(Numeric(15, 2), nullable=True)
    contract_accessorials_shuttle = Column(Numeric(15, 2), nullable=True)
    contract_accessorials_long_carry = Column(Numeric(15, 2), nullable=True)
    contract_accessorials_packing = Column(Numeric(15, 2), nullable=True)
    contract_accessorials_bulky = Column(Numeric(15, 2), nullable=True)
    contract_accessorials_other = Column(Numeric(15, 2), nullable=True)
    
    # Extra accessorials (added by the driver on the day)
    extra_stairs = Column(Numeric(15, 2), nullable=True)
    extra_shuttle = Column(Numeric(15, 2), nullable=True)
    extra_long_carry = Column(Numeric(15, 2), nullable=True)
    extra_packing = Column(Numeric(15, 2), nullable=True)
    extra_bulky = Column(Numeric(15, 2), nullable=True)
    extra_other = Column(Numeric(15, 2), nullable=True)
    
    # Storage
    storage_move_in_fee = Column(Numeric(15, 2), nullable=True)
    storage_daily_fee = Column(Numeric(15, 2), nullable=True)
    storage_days_billed = Column(Integer, nullable=True)
    storage_drop = Column(Boolean, default=False, nullable=False)
    
    # Collections
    amount_collected_on_delivery = Column(Numeric(15, 2), nullable=True)
    amount_paid_directly_to_company = Column(Numeric(15, 2), nullable=True)
    balance_due_on_delivery = Column(Numeric(15, 2), nullable=True)
    
    # COD state, written by the delivery workflow
    cod_received = Column(Boolean, default=False, nullable=False)
    company_approved_exception_delivery = Column(Boolean, default=False, nullable=False)
    
    # Computed by compute_and_save_load_financials
    base_revenue = Column(Numeric(15, 2), nullable=True)
    contract_accessorials_total = Column(Numeric(15, 2), nullable=True)
    extra_accessorials_total = Column(Numeric(15, 2), nullable=True)
    storage_total = Column(Numeric(15, 2), nullable=True)
    total_revenue = Column(Numeric(15, 2), nullable=True)
    company_owes = Column(Numeric(15, 2), nullable=True)
    
    # Relationships
    trip = relationship("Trip", back_populates="loads")
    company = relationship("Company", back_populates="loads")
