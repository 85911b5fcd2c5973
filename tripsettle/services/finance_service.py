"""
Read side of settlements: snapshots, lists and the finance summary.
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from tripsettle.core.config import settings
from tripsettle.core.utils import round_money
from tripsettle.models.company import Company
from tripsettle.models.settlement import (
    Payable, Receivable, ReceivableStatus, SettlementLineItem, SettlementStatus, TripSettlement
)
from tripsettle.schemas.settlement import (
    CompanyReceivableTotal, FinanceSummary, PayableResponse, ReceivableResponse,
    RecentSettledTrip, SettlementLineItemResponse, SettlementListItem, SettlementSnapshot,
    TripSettlementResponse
)
from tripsettle.services.financial_inputs import resolve_trip
from tripsettle.services.settlement_service import get_trip_settlement


def _receivable_response(receivable: Receivable) -> ReceivableResponse:
    response = ReceivableResponse.model_validate(receivable)
    response.company_name = receivable.company.name if receivable.company else None
    return response


def _payable_response(payable: Payable) -> PayableResponse:
    response = PayableResponse.model_validate(payable)
    response.driver_name = payable.driver.full_name if payable.driver else None
    return response


def get_settlement_snapshot(trip_id: int, owner_id: int, db: Session) -> SettlementSnapshot:
    """Settlement header with its line items, receivables and payables."""
    resolve_trip(trip_id, owner_id, db)
    settlement = get_trip_settlement(trip_id, owner_id, db)
    line_items = db.query(SettlementLineItem).filter(
        SettlementLineItem.settlement_id == settlement.id
    ).order_by(SettlementLineItem.id).all()
    
    return SettlementSnapshot(
        settlement=TripSettlementResponse.model_validate(settlement),
        line_items=[SettlementLineItemResponse.model_validate(item) for item in line_items],
        receivables=[_receivable_response(r) for r in settlement.receivables],
        payables=[_payable_response(p) for p in settlement.payables],
    )


def list_trip_settlements(
    owner_id: int,
    db: Session,
    status: Optional[SettlementStatus] = None,
    limit: int = 50,
    offset: int = 0,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None
) -> List[SettlementListItem]:
    """List an owner's settlements, newest first. Date bounds are inclusive and apply to creation time."""
    query = db.query(TripSettlement).filter(TripSettlement.owner_id == owner_id)
    if status:
        query = query.filter(TripSettlement.status == status)
    if from_date:
        query = query.filter(TripSettlement.created_at >= datetime.combine(from_date, time.min))
    if to_date:
        query = query.filter(TripSettlement.created_at < datetime.combine(to_date + timedelta(days=1), time.min))
    settlements = query.order_by(
        TripSettlement.created_at.desc(), TripSettlement.id.desc()
    ).offset(offset).limit(limit).all()
    
    items = []
    for s in settlements:
        companies = []
        for load in s.trip.loads:
            if load.company and load.company.name not in companies:
                companies.append(load.company.name)
        items.append(SettlementListItem(
            id=s.id,
            trip_id=s.trip_id,
            trip_number=s.trip.trip_number,
            driver_name=s.driver.full_name if s.driver else None,
            companies=companies,
            status=s.status,
            total_revenue=s.total_revenue,
            total_driver_pay=s.total_driver_pay,
            total_expenses=s.total_expenses,
            total_profit=s.total_profit,
            created_at=s.created_at,
            closed_at=s.closed_at,
        ))
    return items


def list_receivables(
    owner_id: int,
    db: Session,
    status: Optional[ReceivableStatus] = None,
    company_id: Optional[int] = None
) -> List[ReceivableResponse]:
    """List an owner's receivables, newest first."""
    query = db.query(Receivable).filter(Receivable.owner_id == owner_id)
    if status:
        query = query.filter(Receivable.status == status)
    if company_id is not None:
        query = query.filter(Receivable.company_id == company_id)
    receivables = query.order_by(Receivable.created_at.desc(), Receivable.id.desc()).all()
    return [_receivable_response(r) for r in receivables]


def list_driver_payables(owner_id: int, db: Session, driver_id: Optional[int] = None) -> List[PayableResponse]:
    """List what the owner owes drivers, newest first."""
    query = db.query(Payable).filter(Payable.owner_id == owner_id)
    if driver_id is not None:
        query = query.filter(Payable.driver_id == driver_id)
    payables = query.order_by(Payable.created_at.desc(), Payable.id.desc()).all()
    return [_payable_response(p) for p in payables]


def get_finance_summary(owner_id: int, db: Session, period_days: Optional[int] = None) -> FinanceSummary:
    """
    Aggregate settlements and open receivables for the finance dashboard.
    
    Args:
        owner_id: Owner whose books are summarized
        db: Database session
        period_days: Only count settlements created in the last N days (all time if unset)
    
    Returns:
        FinanceSummary with totals, top companies by open receivables and the latest settled trips
    """
    top_n = settings.FINANCE_SUMMARY_TOP_N
    
    query = db.query(TripSettlement).filter(TripSettlement.owner_id == owner_id)
    if period_days and period_days > 0:
        since = datetime.utcnow() - timedelta(days=period_days)
        query = query.filter(TripSettlement.created_at >= since)
    settlements = query.order_by(TripSettlement.created_at.desc(), TripSettlement.id.desc()).all()
    
    open_receivables = db.query(Receivable).filter(
        Receivable.owner_id == owner_id,
        Receivable.status == ReceivableStatus.OPEN
    ).order_by(Receivable.id).all()
    
    company_totals: Dict[Optional[int], Decimal] = {}
    company_names: Dict[Optional[int], str] = {}
    for r in open_receivables:
        company_totals[r.company_id] = company_totals.get(r.company_id, Decimal("0")) + r.amount
        company_names[r.company_id] = r.company.name if r.company else "Unknown"
    
    top_companies = sorted(
        (
            CompanyReceivableTotal(company_id=cid, company_name=company_names[cid], total=round_money(total))
            for cid, total in company_totals.items()
        ),
        key=lambda c: c.total,
        reverse=True
    )[:top_n]
    
    recent_trips = [
        RecentSettledTrip(
            settlement_id=s.id,
            trip_id=s.trip_id,
            trip_number=s.trip.trip_number,
            driver_name=s.driver.full_name if s.driver else None,
            revenue=s.total_revenue,
            profit=s.total_profit,
            settled_at=s.closed_at or s.created_at,
        )
        for s in settlements[:top_n]
    ]
    
    return FinanceSummary(
        total_revenue=round_money(sum(s.total_revenue for s in settlements)),
        total_driver_pay=round_money(sum(s.total_driver_pay for s in settlements)),
        total_expenses=round_money(sum(s.total_expenses for s in settlements)),
        total_profit=round_money(sum(s.total_profit for s in settlements)),
        open_receivables_amount=round_money(sum(r.amount for r in open_receivables)),
        open_receivables_count=len(open_receivables),
        top_companies=top_companies,
        recent_trips=recent_trips,
    )
