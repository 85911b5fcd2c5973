"""
Pydantic schemas for settlements, receivables and payables.
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from tripsettle.models.settlement import (
    LineItemCategory, PayableStatus, ReceivableStatus, SettlementStatus
)


class TripSettlementResponse(BaseModel):
    """Schema for settlement header response."""
    id: int
    trip_id: int
    company_id: Optional[int] = None
    driver_id: Optional[int] = None
    truck_id: Optional[int] = None
    total_revenue: Decimal
    total_driver_pay: Decimal
    total_expenses: Decimal
    total_profit: Decimal
    status: SettlementStatus
    closed_at: Optional[datetime] = None
    created_at: datetime
    
    class Config:
        from_attributes = True


class SettlementLineItemResponse(BaseModel):
    """Schema for a settlement line item."""
    id: int
    category: LineItemCategory
    description: str
    amount: Decimal
    load_id: Optional[int] = None
    company_id: Optional[int] = None
    
    class Config:
        from_attributes = True


class ReceivableResponse(BaseModel):
    """Schema for a receivable."""
    id: int
    trip_id: int
    settlement_id: int
    company_id: int
    company_name: Optional[str] = None
    amount: Decimal
    status: ReceivableStatus
    due_date: Optional[date] = None
    created_at: datetime
    
    class Config:
        from_attributes = True


class PayableResponse(BaseModel):
    """Schema for a payable to a driver."""
    id: int
    trip_id: int
    settlement_id: int
    driver_id: int
    driver_name: Optional[str] = None
    payee_type: str
    amount: Decimal
    status: PayableStatus
    created_at: datetime
    
    class Config:
        from_attributes = True


class SettlementSnapshot(BaseModel):
    """Settlement with everything it spawned."""
    settlement: TripSettlementResponse
    line_items: List[SettlementLineItemResponse] = []
    receivables: List[ReceivableResponse] = []
    payables: List[PayableResponse] = []


class SettlementListItem(BaseModel):
    """Row of the settlements list."""
    id: int
    trip_id: int
    trip_number: Optional[str] = None
    driver_name: Optional[str] = None
    companies: List[str] = []
    status: SettlementStatus
    total_revenue: Decimal
    total_driver_pay: Decimal
    total_expenses: Decimal
    total_profit: Decimal
    created_at: datetime
    closed_at: Optional[datetime] = None


class CompanyReceivableTotal(BaseModel):
    company_id: Optional[int] = None
    company_name: str
    total: Decimal


class RecentSettledTrip(BaseModel):
    settlement_id: int
    trip_id: int
    trip_number: Optional[str] = None
    driver_name: Optional[str] = None
    revenue: Decimal
    profit: Decimal
    settled_at: datetime


class FinanceSummary(BaseModel):
    """Totals for the finance dashboard."""
    total_revenue: Decimal
    total_driver_pay: Decimal
    total_expenses: Decimal
    total_profit: Decimal
    open_receivables_amount: Decimal
    open_receivables_count: int
    top_companies: List[CompanyReceivableTotal] = []
    recent_trips: List[RecentSettledTrip] = []
