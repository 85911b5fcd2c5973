"""
Financial input resolver.

Gathers the raw fields a computation needs from storage and hands the pure
calculators plain values. This is the only place the calculators' inputs
are read from the database.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
from tripsettle.core.exceptions import NotFoundError
from tripsettle.core.utils import round_money, to_decimal
from tripsettle.models.company import TrustLevel
from tripsettle.models.driver import Driver
from tripsettle.models.load import Load
from tripsettle.models.trip import Trip
from tripsettle.schemas.financials import DriverPayPlan, LoadFinancialsInput, PreDeliveryCheckInput

CONTRACT_ACCESSORIAL_FIELDS = (
    "contract_accessorials_stairs",
    "contract_accessorials_shuttle",
    "contract_accessorials_long_carry",
    "contract_accessorials_packing",
    "contract_accessorials_bulky",
    "contract_accessorials_other",
)

EXTRA_ACCESSORIAL_FIELDS = (
    "extra_stairs",
    "extra_shuttle",
    "extra_long_carry",
    "extra_packing",
    "extra_bulky",
    "extra_other",
)


@dataclass
class LoadSettlementInput:
    """One load as the settlement builder sees it."""
    load_id: Optional[int]
    company_id: Optional[int]
    financials: LoadFinancialsInput
    storage_drop: bool = False


@dataclass
class ExpenseInput:
    """One trip expense."""
    category: str
    amount: Decimal
    description: Optional[str] = None
    paid_by: Optional[str] = None


@dataclass
class TripSettlementInput:
    """Snapshot of a trip taken at the start of a settlement build."""
    trip_id: Optional[int]
    driver_id: Optional[int]
    truck_id: Optional[int]
    start_date: Optional[date]
    end_date: Optional[date]
    odometer_start: Optional[Decimal]
    odometer_end: Optional[Decimal]
    odometer_start_photo_url: Optional[str]
    odometer_end_photo_url: Optional[str]
    loads: List[LoadSettlementInput] = field(default_factory=list)
    expenses: List[ExpenseInput] = field(default_factory=list)


def resolve_trip(trip_id: int, owner_id: int, db: Session, for_update: bool = False) -> Trip:
    """Load an owner's trip, optionally locking its row for the rest of the transaction."""
    query = db.query(Trip).filter(Trip.id == trip_id, Trip.owner_id == owner_id)
    if for_update:
        query = query.with_for_update()
    trip = query.first()
    if not trip:
        raise NotFoundError("Trip not found or not accessible")
    return trip


def resolve_driver_pay_plan(driver_id: int, owner_id: int, db: Session) -> DriverPayPlan:
    """Look up the pay plan of an owner's driver."""
    driver = db.query(Driver).filter(
        Driver.id == driver_id,
        Driver.owner_id == owner_id
    ).first()
    if not driver:
        raise NotFoundError(f"Driver {driver_id} not found for pay calculation")
    return DriverPayPlan(
        pay_mode=driver.pay_mode,
        rate_per_mile=driver.rate_per_mile,
        rate_per_cuft=driver.rate_per_cuft,
        percent_of_revenue=driver.percent_of_revenue,
        flat_daily_rate=driver.flat_daily_rate,
    )


def resolve_load(load_id: int, owner_id: int, db: Session) -> Load:
    """Load an owner's load."""
    load = db.query(Load).filter(Load.id == load_id, Load.owner_id == owner_id).first()
    if not load:
        raise NotFoundError("Load not found or not accessible")
    return load


def _effective_rate(load: Load) -> Decimal:
    """Contract rate when set, otherwise the list rate."""
    return to_decimal(load.contract_rate_per_cuft) or to_decimal(load.rate_per_cuft)


def load_financials_input(load: Load) -> LoadFinancialsInput:
    """Map a stored load onto calculator input."""
    values = {name: getattr(load, name) for name in CONTRACT_ACCESSORIAL_FIELDS + EXTRA_ACCESSORIAL_FIELDS}
    return LoadFinancialsInput(
        actual_cuft_loaded=load.actual_cuft_loaded,
        rate_per_cuft=_effective_rate(load),
        storage_move_in_fee=load.storage_move_in_fee,
        storage_daily_fee=load.storage_daily_fee,
        storage_days_billed=load.storage_days_billed,
        amount_collected_on_delivery=load.amount_collected_on_delivery,
        amount_paid_directly_to_company=load.amount_paid_directly_to_company,
        **values,
    )


def pre_delivery_input(load: Load) -> PreDeliveryCheckInput:
    """Map a stored load plus its company's live trust state onto evaluator input."""
    company = load.company
    contract_total = round_money(sum(to_decimal(getattr(load, name)) for name in CONTRACT_ACCESSORIAL_FIELDS))
    return PreDeliveryCheckInput(
        actual_cuft_loaded=load.actual_cuft_loaded,
        rate_per_cuft=load.rate_per_cuft,
        contract_rate_per_cuft=load.contract_rate_per_cuft,
        contract_accessorials_total=contract_total,
        balance_due_on_delivery=load.balance_due_on_delivery,
        trust_level=company.trust_level if company else TrustLevel.COD_REQUIRED,
        company_name=company.name if company else None,
        cod_received=load.cod_received,
        company_approved_exception=load.company_approved_exception_delivery,
    )


def trip_settlement_input(trip: Trip) -> TripSettlementInput:
    """Snapshot a trip, its loads and its expenses for the settlement builder."""
    return TripSettlementInput(
        trip_id=trip.id,
        driver_id=trip.driver_id,
        truck_id=trip.truck_id,
        start_date=trip.start_date,
        end_date=trip.end_date,
        odometer_start=trip.odometer_start,
        odometer_end=trip.odometer_end,
        odometer_start_photo_url=trip.odometer_start_photo_url,
        odometer_end_photo_url=trip.odometer_end_photo_url,
        loads=[
            LoadSettlementInput(
                load_id=load.id,
                company_id=load.company_id,
                financials=load_financials_input(load),
                storage_drop=bool(load.storage_drop),
            )
            for load in trip.loads
        ],
        expenses=[
            ExpenseInput(
                category=(expense.category or "").strip().lower(),
                amount=to_decimal(expense.amount),
                description=expense.description,
                paid_by=expense.paid_by,
            )
            for expense in trip.expenses
        ],
    )
