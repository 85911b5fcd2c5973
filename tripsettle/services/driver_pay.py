"""
Driver pay calculator.
"""
import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Union
from tripsettle.core.utils import round_money
from tripsettle.schemas.financials import (
    DriverPayPlan, DriverPayResult, PayItem, PayMode, TripMetrics
)

HUNDRED = Decimal("100")


def calculate_days_worked(start: Optional[Union[date, datetime]], end: Optional[Union[date, datetime]]) -> int:
    """Inclusive day span between trip start and end; 1 when either date is missing."""
    if not start or not end:
        return 1
    if isinstance(start, datetime) or isinstance(end, datetime):
        start_dt = start if isinstance(start, datetime) else datetime.combine(start, datetime.min.time())
        end_dt = end if isinstance(end, datetime) else datetime.combine(end, datetime.min.time())
        diff = math.ceil((end_dt - start_dt).total_seconds() / 86400)
    else:
        diff = (end - start).days
    return max(0, diff) + 1


def calculate_driver_pay(
    plan: Union[DriverPayPlan, Mapping[str, Any]],
    metrics: Union[TripMetrics, Mapping[str, Any]]
) -> DriverPayResult:
    """
    Compute driver pay line items for a pay plan.
    
    Only the rates of the selected mode are read. Items that come out at zero
    or below are dropped. Unknown modes pay nothing.
    """
    if not isinstance(plan, DriverPayPlan):
        plan = DriverPayPlan.model_validate(dict(plan or {}))
    if not isinstance(metrics, TripMetrics):
        metrics = TripMetrics.model_validate(dict(metrics or {}))
    
    try:
        mode = PayMode(plan.pay_mode)
    except ValueError:
        return DriverPayResult(pay_mode=plan.pay_mode, items=[], total=round_money(0))
    
    lines = []
    if mode == PayMode.PER_MILE:
        lines.append(("Per mile", metrics.actual_miles * plan.rate_per_mile))
    elif mode == PayMode.PER_CUFT:
        lines.append(("Per cuft", metrics.total_cuft_loaded * plan.rate_per_cuft))
    elif mode == PayMode.PER_MILE_AND_CUFT:
        lines.append(("Per mile", metrics.actual_miles * plan.rate_per_mile))
        lines.append(("Per cuft", metrics.total_cuft_loaded * plan.rate_per_cuft))
    elif mode == PayMode.PERCENT_OF_REVENUE:
        lines.append(("Percent of revenue", metrics.revenue_base * plan.percent_of_revenue / HUNDRED))
    elif mode == PayMode.FLAT_DAILY_RATE:
        lines.append(("Flat daily rate", metrics.days_worked * plan.flat_daily_rate))
    
    items: List[PayItem] = []
    for description, amount in lines:
        amount = round_money(amount)
        if amount > 0:
            items.append(PayItem(description=description, amount=amount))
    
    return DriverPayResult(
        pay_mode=mode.value,
        items=items,
        total=round_money(sum(item.amount for item in items)),
    )
