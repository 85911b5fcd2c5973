"""
Finance reporting routes.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from tripsettle.db.session import get_db
from tripsettle.models.settlement import ReceivableStatus
from tripsettle.schemas.settlement import FinanceSummary, PayableResponse, ReceivableResponse
from tripsettle.api.dependencies import get_current_owner_id
from tripsettle.services import finance_service

router = APIRouter(prefix="/finance", tags=["finance"])


@router.get("/summary", response_model=FinanceSummary)
async def get_summary(
    period_days: Optional[int] = Query(None, ge=1),
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Revenue, pay, expense and profit totals plus open receivables."""
    return finance_service.get_finance_summary(owner_id, db, period_days=period_days)


@router.get("/receivables", response_model=List[ReceivableResponse])
async def get_receivables(
    status_filter: Optional[ReceivableStatus] = Query(None, alias="status"),
    company_id: Optional[int] = None,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Money owed by shipping companies."""
    return finance_service.list_receivables(owner_id, db, status=status_filter, company_id=company_id)


@router.get("/payables", response_model=List[PayableResponse])
async def get_payables(
    driver_id: Optional[int] = None,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Money owed to drivers."""
    return finance_service.list_driver_payables(owner_id, db, driver_id=driver_id)
