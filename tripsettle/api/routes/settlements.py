"""
Trip settlement routes.
"""
from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from tripsettle.db.session import get_db
from tripsettle.models.settlement import SettlementStatus
from tripsettle.schemas.settlement import SettlementListItem, SettlementSnapshot, TripSettlementResponse
from tripsettle.api.dependencies import get_current_owner_id
from tripsettle.services import finance_service, settlement_service

router = APIRouter(tags=["settlements"])


@router.post(
    "/trips/{trip_id}/settlement",
    response_model=TripSettlementResponse,
    status_code=status.HTTP_201_CREATED
)
async def settle_trip(
    trip_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Settle a trip."""
    return settlement_service.create_trip_settlement(trip_id, owner_id, db)


@router.post("/trips/{trip_id}/settlement/recalculate", response_model=TripSettlementResponse)
async def recalculate_settlement(
    trip_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Rebuild a trip's settlement from current loads and expenses."""
    return settlement_service.recalculate_trip_settlement(trip_id, owner_id, db)


@router.post("/trips/{trip_id}/settlement/finalize", response_model=TripSettlementResponse)
async def finalize_settlement(
    trip_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Close a draft settlement."""
    return settlement_service.finalize_trip_settlement(trip_id, owner_id, db)


@router.get("/trips/{trip_id}/settlement", response_model=SettlementSnapshot)
async def get_settlement(
    trip_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Get a trip's settlement with line items, receivables and payables."""
    return finance_service.get_settlement_snapshot(trip_id, owner_id, db)


@router.get("/settlements", response_model=List[SettlementListItem])
async def list_settlements(
    status_filter: Optional[SettlementStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """List settlements, newest first."""
    return finance_service.list_trip_settlements(
        owner_id, db,
        status=status_filter, limit=limit, offset=offset,
        from_date=from_date, to_date=to_date
    )
