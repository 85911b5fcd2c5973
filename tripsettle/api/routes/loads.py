"""
Load financial and pre-delivery routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from tripsettle.db.session import get_db
from tripsettle.schemas.financials import (
    LoadFinancialResult, LoadFinancialsInput, PreDeliveryCheck, PreDeliveryCheckInput
)
from tripsettle.api.dependencies import get_current_owner_id
from tripsettle.services.load_financials import calculate_load_financials, compute_and_save_load_financials
from tripsettle.services.pre_delivery import generate_pre_delivery_check, get_load_pre_delivery_check

router = APIRouter(prefix="/loads", tags=["loads"])


@router.post("/financials/preview", response_model=LoadFinancialResult)
async def preview_load_financials(
    data: LoadFinancialsInput,
    owner_id: int = Depends(get_current_owner_id)
):
    """Calculate load financials from the given terms without saving anything."""
    return calculate_load_financials(data)


@router.post("/pre-delivery-check/preview", response_model=PreDeliveryCheck)
async def preview_pre_delivery_check(
    data: PreDeliveryCheckInput,
    owner_id: int = Depends(get_current_owner_id)
):
    """Evaluate COD requirements for the given inputs."""
    return generate_pre_delivery_check(data)


@router.post("/{load_id}/financials", response_model=LoadFinancialResult)
async def save_load_financials(
    load_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Recompute a load's financials and store the totals on the load."""
    return compute_and_save_load_financials(load_id, owner_id, db)


@router.get("/{load_id}/pre-delivery-check", response_model=PreDeliveryCheck)
async def get_pre_delivery_check(
    load_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """COD decision for a stored load, using its company's current trust level."""
    return get_load_pre_delivery_check(load_id, owner_id, db)
