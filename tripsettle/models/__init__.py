"""Models package - Import all models for SQLAlchemy registration."""
from tripsettle.models.company import Company, TrustLevel
from tripsettle.models.driver import Driver
from tripsettle.models.trip import Trip, TripStatus
from tripsettle.models.load import Load
from tripsettle.models.expense import TripExpense
from tripsettle.models.settlement import (
    TripSettlement,
    SettlementLineItem,
    Receivable,
    Payable,
    SettlementStatus,
    LineItemCategory,
    ReceivableStatus,
    PayableStatus,
)

__all__ = [
    "Company",
    "TrustLevel",
    "Driver",
    "Trip",
    "TripStatus",
    "Load",
    "TripExpense",
    "TripSettlement",
    "SettlementLineItem",
    "Receivable",
    "Payable",
    "SettlementStatus",
    "LineItemCategory",
    "ReceivableStatus",
    "PayableStatus",
]
