"""
Trip settlement service.

Turns a trip's loads, driver pay plan and expenses into one persisted
settlement: line items, a receivable per company that still owes money,
and a payable to the driver. Recalculation tears all of that down and
builds it again inside the same transaction.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from tripsettle.core.exceptions import CalculationError, ConflictError, NotFoundError, ValidationError
from tripsettle.core.utils import round_money, to_decimal
from tripsettle.db.session import transaction
from tripsettle.models.settlement import (
    LineItemCategory, Payable, Receivable, SettlementLineItem, SettlementStatus, TripSettlement
)
from tripsettle.models.trip import Trip, TripStatus
from tripsettle.schemas.financials import DriverPayPlan, LoadFinancialResult, TripMetrics
from tripsettle.services.driver_pay import calculate_days_worked, calculate_driver_pay
from tripsettle.services.financial_inputs import (
    TripSettlementInput, resolve_driver_pay_plan, resolve_trip, trip_settlement_input
)
from tripsettle.services.load_financials import calculate_load_financials

logger = logging.getLogger(__name__)

SETTLEABLE_STATUSES = (TripStatus.ACTIVE, TripStatus.COMPLETED)

# Expenses paid out of the driver's pocket are owed back to the driver
DRIVER_PAID_METHODS = ("driver_personal", "driver_cash")

EXPENSE_CATEGORY_MAP = {
    "fuel": LineItemCategory.FUEL,
    "tolls": LineItemCategory.TOLLS,
}

DEFAULT_EXPENSE_DESCRIPTIONS = {
    LineItemCategory.FUEL: "Fuel",
    LineItemCategory.TOLLS: "Tolls",
    LineItemCategory.EXPENSE: "Expense",
}

COST_CATEGORIES = (
    LineItemCategory.DRIVER_PAY,
    LineItemCategory.FUEL,
    LineItemCategory.TOLLS,
    LineItemCategory.EXPENSE,
    LineItemCategory.REIMBURSEMENT,
)


@dataclass
class PlannedLineItem:
    """A line item computed but not yet written."""
    category: LineItemCategory
    description: str
    amount: Decimal
    load_id: Optional[int] = None
    company_id: Optional[int] = None


@dataclass
class SettlementPlan:
    """Everything a settlement build will write, computed up front."""
    actual_miles: Decimal
    total_cuft: Decimal
    company_id: Optional[int]
    line_items: List[PlannedLineItem] = field(default_factory=list)
    receivables: Dict[int, Decimal] = field(default_factory=dict)  # company_id -> amount due
    total_revenue: Decimal = Decimal("0.00")
    total_driver_pay: Decimal = Decimal("0.00")
    fuel_total: Decimal = Decimal("0.00")
    tolls_total: Decimal = Decimal("0.00")
    other_expenses_total: Decimal = Decimal("0.00")
    reimbursements_total: Decimal = Decimal("0.00")
    total_expenses: Decimal = Decimal("0.00")
    total_profit: Decimal = Decimal("0.00")


# =============================================================================
# PURE PLANNING
# =============================================================================


def validate_settlement_preconditions(trip: TripSettlementInput) -> Decimal:
    """Check odometer evidence and return actual miles. Raises ValidationError."""
    missing = []
    if trip.odometer_start is None:
        missing.append("odometer start reading")
    if trip.odometer_end is None:
        missing.append("odometer end reading")
    if not trip.odometer_start_photo_url:
        missing.append("odometer start photo")
    if not trip.odometer_end_photo_url:
        missing.append("odometer end photo")
    if missing:
        raise ValidationError(
            f"Cannot settle trip: missing {', '.join(missing)}. "
            "Odometer start/end and photos are required to settle this trip."
        )

    actual_miles = to_decimal(trip.odometer_end) - to_decimal(trip.odometer_start)
    if actual_miles <= 0:
        raise ValidationError("Actual miles must be greater than zero to settle this trip.")
    return actual_miles


def receivable_contribution(result: LoadFinancialResult, storage_drop: bool) -> Decimal:
    """
    What the load's company still owes after collections.

    Driver-collected extras are not billable to the company. On a storage
    drop the driver's collection does not reduce the company's share.
    """
    billable = result.base_revenue + result.contract_accessorials_total + result.storage_total
    collected = Decimal("0") if storage_drop else result.collected_on_delivery
    return round_money(max(Decimal("0"), billable - result.paid_to_company - collected))


def category_totals(line_items: Iterable) -> Dict[LineItemCategory, Decimal]:
    """Sum line item amounts per category. Works on planned and persisted items."""
    totals = {category: Decimal("0") for category in LineItemCategory}
    for item in line_items:
        totals[LineItemCategory(item.category)] += to_decimal(item.amount)
    return {category: round_money(amount) for category, amount in totals.items()}


def verify_settlement_totals(settlement, line_items: Iterable) -> bool:
    """True when the line items add up to the settlement's headline totals."""
    totals = category_totals(line_items)
    expenses = round_money(sum(totals[category] for category in COST_CATEGORIES))
    return (
        round_money(settlement.total_revenue) == totals[LineItemCategory.REVENUE]
        and round_money(settlement.total_driver_pay) == totals[LineItemCategory.DRIVER_PAY]
        and round_money(settlement.total_expenses) == expenses
        and round_money(settlement.total_profit) == round_money(totals[LineItemCategory.REVENUE] - expenses)
    )


def _load_revenue_items(load, result: LoadFinancialResult) -> List[PlannedLineItem]:
    financials = load.financials
    parts = (
        ("Linehaul (contract)", result.base_revenue),
        ("Contract accessorials", result.contract_accessorials_total),
        ("Storage move-in fee", round_money(financials.storage_move_in_fee)),
        ("Storage daily fee", round_money(financials.storage_daily_fee * financials.storage_days_billed)),
        ("On-site accessorials (collected by driver)", result.extra_accessorials_total),
    )
    return [
        PlannedLineItem(
            category=LineItemCategory.REVENUE,
            description=description,
            amount=amount,
            load_id=load.load_id,
            company_id=load.company_id,
        )
        for description, amount in parts
        if amount != 0
    ]


def build_settlement_plan(trip: TripSettlementInput, pay_plan: Optional[DriverPayPlan]) -> SettlementPlan:
    """
    Compute a trip settlement without touching storage.

    Deterministic for a given input, so a recalculation over unchanged data
    reproduces the same plan.
    """
    actual_miles = validate_settlement_preconditions(trip)

    line_items: List[PlannedLineItem] = []
    receivables: Dict[int, Decimal] = {}
    total_cuft = Decimal("0")

    for load in trip.loads:
        result = calculate_load_financials(load.financials)
        total_cuft += load.financials.actual_cuft_loaded
        line_items.extend(_load_revenue_items(load, result))

        contribution = receivable_contribution(result, load.storage_drop)
        if load.company_id is not None and contribution > 0:
            receivables[load.company_id] = receivables.get(load.company_id, Decimal("0")) + contribution

    revenue_total = category_totals(line_items)[LineItemCategory.REVENUE]

    reimbursements: List[PlannedLineItem] = []
    for expense in trip.expenses:
        amount = round_money(expense.amount)
        if expense.category == "driver_pay":
            # Counted through the driver's pay plan
            category = None
        else:
            category = EXPENSE_CATEGORY_MAP.get(expense.category, LineItemCategory.EXPENSE)
        if category is not None:
            line_items.append(PlannedLineItem(
                category=category,
                description=expense.description or DEFAULT_EXPENSE_DESCRIPTIONS[category],
                amount=amount,
            ))

        # Intentionally counted a second time: the driver is owed the cash back
        if expense.paid_by in DRIVER_PAID_METHODS:
            reimbursements.append(PlannedLineItem(
                category=LineItemCategory.REIMBURSEMENT,
                description=expense.description or "Reimbursement owed to driver",
                amount=amount,
            ))

    if trip.driver_id is not None and pay_plan is not None:
        metrics = TripMetrics(
            actual_miles=actual_miles,
            total_cuft_loaded=total_cuft,
            revenue_base=revenue_total,
            days_worked=calculate_days_worked(trip.start_date, trip.end_date),
        )
        pay = calculate_driver_pay(pay_plan, metrics)
        for item in pay.items:
            line_items.append(PlannedLineItem(
                category=LineItemCategory.DRIVER_PAY,
                description=item.description,
                amount=item.amount,
            ))

    line_items.extend(reimbursements)

    totals = category_totals(line_items)
    total_expenses = round_money(sum(totals[category] for category in COST_CATEGORIES))

    return SettlementPlan(
        actual_miles=actual_miles,
        total_cuft=total_cuft,
        company_id=next((load.company_id for load in trip.loads if load.company_id is not None), None),
        line_items=line_items,
        receivables={company_id: amount for company_id, amount in receivables.items() if amount > 0},
        total_revenue=totals[LineItemCategory.REVENUE],
        total_driver_pay=totals[LineItemCategory.DRIVER_PAY],
        fuel_total=totals[LineItemCategory.FUEL],
        tolls_total=totals[LineItemCategory.TOLLS],
        other_expenses_total=totals[LineItemCategory.EXPENSE],
        reimbursements_total=totals[LineItemCategory.REIMBURSEMENT],
        total_expenses=total_expenses,
        total_profit=round_money(totals[LineItemCategory.REVENUE] - total_expenses),
    )


# =============================================================================
# PERSISTENCE
# =============================================================================


def _persist_settlement(trip: Trip, plan: SettlementPlan, owner_id: int, db: Session) -> TripSettlement:
    """Write header, line items, receivables, payable and trip summary, in that order."""
    settlement = TripSettlement(
        owner_id=owner_id,
        trip_id=trip.id,
        company_id=plan.company_id,
        driver_id=trip.driver_id,
        truck_id=trip.truck_id,
        total_revenue=plan.total_revenue,
        total_driver_pay=plan.total_driver_pay,
        total_expenses=plan.total_expenses,
        total_profit=plan.total_profit,
        status=SettlementStatus.DRAFT,
    )
    db.add(settlement)
    try:
        db.flush()
    except IntegrityError as e:
        # Unique trip_id: another settle for this trip committed first
        raise ConflictError("A settlement already exists for this trip") from e

    db.add_all([
        SettlementLineItem(
            owner_id=owner_id,
            settlement_id=settlement.id,
            trip_id=trip.id,
            load_id=item.load_id,
            company_id=item.company_id or plan.company_id,
            driver_id=trip.driver_id,
            category=item.category,
            description=item.description,
            amount=item.amount,
        )
        for item in plan.line_items
    ])

    for company_id in sorted(plan.receivables):
        db.add(Receivable(
            owner_id=owner_id,
            company_id=company_id,
            trip_id=trip.id,
            settlement_id=settlement.id,
            amount=plan.receivables[company_id],
        ))

    if trip.driver_id is not None and plan.total_driver_pay > 0:
        db.add(Payable(
            owner_id=owner_id,
            payee_type="driver",
            driver_id=trip.driver_id,
            trip_id=trip.id,
            settlement_id=settlement.id,
            amount=plan.total_driver_pay,
        ))

    trip.revenue_total = plan.total_revenue
    trip.driver_pay_total = plan.total_driver_pay
    trip.fuel_total = plan.fuel_total
    trip.tolls_total = plan.tolls_total
    trip.other_expenses_total = plan.other_expenses_total
    trip.profit_total = plan.total_profit
    trip.actual_miles = plan.actual_miles
    trip.total_miles = plan.actual_miles
    trip.status = TripStatus.SETTLED

    db.flush()
    return settlement


def _settle(trip: Trip, owner_id: int, db: Session) -> TripSettlement:
    """Build and write a settlement for a locked trip. Caller owns the transaction."""
    if trip.status == TripStatus.SETTLED:
        raise ConflictError("Trip is already settled")
    if trip.status not in SETTLEABLE_STATUSES:
        raise ValidationError(
            f"Trip must be active or completed to settle (current status: {trip.status.value})"
        )
    existing = db.query(TripSettlement.id).filter(TripSettlement.trip_id == trip.id).first()
    if existing:
        raise ConflictError("A settlement already exists for this trip")

    trip_input = trip_settlement_input(trip)
    pay_plan = None
    if trip.driver_id is not None:
        pay_plan = resolve_driver_pay_plan(trip.driver_id, owner_id, db)

    plan = build_settlement_plan(trip_input, pay_plan)
    if not verify_settlement_totals(plan, plan.line_items):
        raise CalculationError(f"Settlement plan for trip {trip.id} does not add up")

    return _persist_settlement(trip, plan, owner_id, db)


def create_trip_settlement(trip_id: int, owner_id: int, db: Session) -> TripSettlement:
    """
    Settle a trip: write a draft settlement and mark the trip settled.

    All writes share one transaction; on any failure nothing is kept.
    """
    try:
        with transaction(db):
            trip = resolve_trip(trip_id, owner_id, db, for_update=True)
            settlement = _settle(trip, owner_id, db)
    except (ValidationError, ConflictError) as e:
        logger.warning(f"Settlement of trip {trip_id} refused: {e.message}")
        raise

    db.refresh(settlement)
    logger.info(
        f"Settled trip {trip_id}: revenue={settlement.total_revenue} "
        f"expenses={settlement.total_expenses} profit={settlement.total_profit}"
    )
    return settlement


def _delete_settlement_artifacts(trip_id: int, owner_id: int, db: Session) -> Dict[str, int]:
    """Delete a trip's settlement rows in dependency order. Returns rows removed per table."""
    counts = {}
    for model in (SettlementLineItem, Receivable, Payable, TripSettlement):
        counts[model.__tablename__] = db.query(model).filter(
            model.trip_id == trip_id,
            model.owner_id == owner_id
        ).delete(synchronize_session="fetch")
    return counts


def recalculate_trip_settlement(trip_id: int, owner_id: int, db: Session) -> TripSettlement:
    """
    Drop a trip's settlement and rebuild it from current data.

    Teardown and rebuild run in one transaction, so a rebuild that fails
    leaves the previous settlement in place.
    """
    with transaction(db):
        trip = resolve_trip(trip_id, owner_id, db, for_update=True)
        current = db.query(TripSettlement).filter(
            TripSettlement.trip_id == trip_id,
            TripSettlement.owner_id == owner_id
        ).first()
        if current and current.status == SettlementStatus.SETTLED:
            raise ConflictError("Settlement has been finalized and cannot be recalculated")

        counts = _delete_settlement_artifacts(trip_id, owner_id, db)
        logger.info(f"Cleared settlement artifacts for trip {trip_id}: {counts}")

        if trip.status == TripStatus.SETTLED:
            trip.status = TripStatus.COMPLETED
        settlement = _settle(trip, owner_id, db)

    db.refresh(settlement)
    logger.info(f"Recalculated trip {trip_id}: profit={settlement.total_profit}")
    return settlement


def get_trip_settlement(trip_id: int, owner_id: int, db: Session) -> TripSettlement:
    """Fetch a trip's settlement header."""
    settlement = db.query(TripSettlement).filter(
        TripSettlement.trip_id == trip_id,
        TripSettlement.owner_id == owner_id
    ).first()
    if not settlement:
        raise NotFoundError("Settlement not found")
    return settlement


def finalize_trip_settlement(trip_id: int, owner_id: int, db: Session) -> TripSettlement:
    """Close a draft settlement."""
    with transaction(db):
        settlement = get_trip_settlement(trip_id, owner_id, db)
        if settlement.status == SettlementStatus.SETTLED:
            raise ConflictError("Settlement is already finalized")
        settlement.status = SettlementStatus.SETTLED
        settlement.closed_at = datetime.utcnow()

    db.refresh(settlement)
    logger.info(f"Finalized settlement {settlement.id} for trip {trip_id}")
    return settlement
