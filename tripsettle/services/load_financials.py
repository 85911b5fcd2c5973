"""
Load financial calculator.

Moving-industry load structure:
1. Base revenue = actual cuft x rate per cuft
2. Contract accessorials = pre-agreed fees (stairs, shuttle, long carry, packing, bulky, other)
3. Extra accessorials = day-of charges added by the driver
4. Storage = move-in fee + daily fee x days billed
5. Total revenue = base + contract + extra + storage
6. Company owes = total revenue - collected on delivery - paid directly to company

Every intermediate total is rounded to cents before it is combined, and
company owes is rounded again after the subtraction.
"""
import logging
from typing import Any, Mapping, Union
from sqlalchemy.orm import Session
from tripsettle.core.utils import round_money
from tripsettle.db.session import transaction
from tripsettle.schemas.financials import (
    LoadFinancialsInput, LoadFinancialBreakdown, LoadFinancialResult
)
from tripsettle.services.financial_inputs import resolve_load, load_financials_input

logger = logging.getLogger(__name__)


def calculate_load_financials(
    data: Union[LoadFinancialsInput, Mapping[str, Any]]
) -> LoadFinancialResult:
    """Calculate load financials. Pure: never raises, missing values count as 0."""
    if not isinstance(data, LoadFinancialsInput):
        data = LoadFinancialsInput.model_validate(dict(data or {}))
    
    contract_parts = (
        data.contract_accessorials_stairs,
        data.contract_accessorials_shuttle,
        data.contract_accessorials_long_carry,
        data.contract_accessorials_packing,
        data.contract_accessorials_bulky,
        data.contract_accessorials_other,
    )
    extra_parts = (
        data.extra_stairs,
        data.extra_shuttle,
        data.extra_long_carry,
        data.extra_packing,
        data.extra_bulky,
        data.extra_other,
    )
    
    base_revenue = round_money(data.actual_cuft_loaded * data.rate_per_cuft)
    contract_total = round_money(sum(contract_parts))
    extra_total = round_money(sum(extra_parts))
    storage_total = round_money(
        data.storage_move_in_fee + data.storage_daily_fee * data.storage_days_billed
    )
    total_revenue = round_money(base_revenue + contract_total + extra_total + storage_total)
    
    collected = data.amount_collected_on_delivery
    paid_to_company = data.amount_paid_directly_to_company
    total_collected = round_money(collected + paid_to_company)
    company_owes = round_money(total_revenue - total_collected)
    
    breakdown = LoadFinancialBreakdown(
        actual_cuft=data.actual_cuft_loaded,
        rate_per_cuft=data.rate_per_cuft,
        base_revenue=base_revenue,
        
        contract_stairs=data.contract_accessorials_stairs,
        contract_shuttle=data.contract_accessorials_shuttle,
        contract_long_carry=data.contract_accessorials_long_carry,
        contract_packing=data.contract_accessorials_packing,
        contract_bulky=data.contract_accessorials_bulky,
        contract_other=data.contract_accessorials_other,
        contract_total=contract_total,
        
        extra_stairs=data.extra_stairs,
        extra_shuttle=data.extra_shuttle,
        extra_long_carry=data.extra_long_carry,
        extra_packing=data.extra_packing,
        extra_bulky=data.extra_bulky,
        extra_other=data.extra_other,
        extra_total=extra_total,
        
        storage_move_in=data.storage_move_in_fee,
        storage_daily_rate=data.storage_daily_fee,
        storage_days=data.storage_days_billed,
        storage_total=storage_total,
        
        collected_on_delivery=collected,
        paid_to_company=paid_to_company,
        total_collected=total_collected,
        
        total_revenue=total_revenue,
        company_owes=company_owes,
    )
    
    return LoadFinancialResult(
        base_revenue=base_revenue,
        contract_accessorials_total=contract_total,
        extra_accessorials_total=extra_total,
        storage_total=storage_total,
        total_revenue=total_revenue,
        collected_on_delivery=collected,
        paid_to_company=paid_to_company,
        total_collected=total_collected,
        company_owes=company_owes,
        breakdown=breakdown,
    )


def compute_and_save_load_financials(load_id: int, owner_id: int, db: Session) -> LoadFinancialResult:
    """Recompute a stored load's financials and write the totals back onto the load."""
    load = resolve_load(load_id, owner_id, db)
    result = calculate_load_financials(load_financials_input(load))
    
    with transaction(db):
        load.base_revenue = result.base_revenue
        load.contract_accessorials_total = result.contract_accessorials_total
        load.extra_accessorials_total = result.extra_accessorials_total
        load.storage_total = result.storage_total
        load.total_revenue = result.total_revenue
        load.company_owes = result.company_owes
    
    logger.info(f"Saved financials for load {load_id}: revenue={result.total_revenue} owes={result.company_owes}")
    return result
