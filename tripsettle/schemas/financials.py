"""
Pydantic schemas for the pure financial calculators.

Inputs coerce every numeric field through ``to_decimal`` before validation,
so malformed or missing values become 0 instead of raising.
"""
from pydantic import BaseModel, field_validator
from typing import List, Optional
from decimal import Decimal
import enum
from tripsettle.core.utils import to_decimal
from tripsettle.models.company import TrustLevel


class AlertLevel(str, enum.Enum):
    """UI styling hint for the driver app."""
    SUCCESS = "success"
    DANGER = "danger"


class PayMode(str, enum.Enum):
    """Driver pay plan variants."""
    PER_MILE = "per_mile"
    PER_CUFT = "per_cuft"
    PER_MILE_AND_CUFT = "per_mile_and_cuft"
    PERCENT_OF_REVENUE = "percent_of_revenue"
    FLAT_DAILY_RATE = "flat_daily_rate"


# =============================================================================
# LOAD FINANCIALS
# =============================================================================


class LoadFinancialsInput(BaseModel):
    """Commercial terms, actuals and collections of one load."""
    actual_cuft_loaded: Decimal = Decimal("0")
    rate_per_cuft: Decimal = Decimal("0")  # Contract rate if set, else list rate
    
    contract_accessorials_stairs: Decimal = Decimal("0")
    contract_accessorials_shuttle: Decimal = Decimal("0")
    contract_accessorials_long_carry: Decimal = Decimal("0")
    contract_accessorials_packing: Decimal = Decimal("0")
    contract_accessorials_bulky: Decimal = Decimal("0")
    contract_accessorials_other: Decimal = Decimal("0")
    
    extra_stairs: Decimal = Decimal("0")
    extra_shuttle: Decimal = Decimal("0")
    extra_long_carry: Decimal = Decimal("0")
    extra_packing: Decimal = Decimal("0")
    extra_bulky: Decimal = Decimal("0")
    extra_other: Decimal = Decimal("0")
    
    storage_move_in_fee: Decimal = Decimal("0")
    storage_daily_fee: Decimal = Decimal("0")
    storage_days_billed: Decimal = Decimal("0")
    
    amount_collected_on_delivery: Decimal = Decimal("0")
    amount_paid_directly_to_company: Decimal = Decimal("0")
    
    @field_validator("*", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return to_decimal(v)


class LoadFinancialBreakdown(BaseModel):
    """Itemized breakdown shown verbatim by the billing screens."""
    actual_cuft: Decimal
    rate_per_cuft: Decimal
    base_revenue: Decimal
    
    contract_stairs: Decimal
    contract_shuttle: Decimal
    contract_long_carry: Decimal
    contract_packing: Decimal
    contract_bulky: Decimal
    contract_other: Decimal
    contract_total: Decimal
    
    extra_stairs: Decimal
    extra_shuttle: Decimal
    extra_long_carry: Decimal
    extra_packing: Decimal
    extra_bulky: Decimal
    extra_other: Decimal
    extra_total: Decimal
    
    storage_move_in: Decimal
    storage_daily_rate: Decimal
    storage_days: Decimal
    storage_total: Decimal
    
    collected_on_delivery: Decimal
    paid_to_company: Decimal
    total_collected: Decimal
    
    total_revenue: Decimal
    company_owes: Decimal


class LoadFinancialResult(BaseModel):
    """Derived load financials."""
    base_revenue: Decimal
    contract_accessorials_total: Decimal
    extra_accessorials_total: Decimal
    storage_total: Decimal
    total_revenue: Decimal
    collected_on_delivery: Decimal
    paid_to_company: Decimal
    total_collected: Decimal
    company_owes: Decimal
    breakdown: LoadFinancialBreakdown


# =============================================================================
# PRE-DELIVERY COD CHECK
# =============================================================================


class PreDeliveryCheckInput(BaseModel):
    """Everything the COD evaluator needs, passed explicitly."""
    actual_cuft_loaded: Decimal = Decimal("0")
    rate_per_cuft: Decimal = Decimal("0")
    contract_rate_per_cuft: Decimal = Decimal("0")
    contract_accessorials_total: Decimal = Decimal("0")
    balance_due_on_delivery: Decimal = Decimal("0")
    
    trust_level: TrustLevel = TrustLevel.COD_REQUIRED
    company_name: str = "the company"
    cod_received: bool = False
    company_approved_exception: bool = False
    
    @field_validator(
        "actual_cuft_loaded", "rate_per_cuft", "contract_rate_per_cuft",
        "contract_accessorials_total", "balance_due_on_delivery",
        mode="before"
    )
    @classmethod
    def coerce_amount(cls, v):
        return to_decimal(v)
    
    @field_validator("trust_level", mode="before")
    @classmethod
    def coerce_trust_level(cls, v):
        """Anything that is not explicitly trusted is treated as COD required."""
        if isinstance(v, TrustLevel):
            return v
        if isinstance(v, str) and v.strip().lower() == TrustLevel.TRUSTED.value:
            return TrustLevel.TRUSTED
        return TrustLevel.COD_REQUIRED
    
    @field_validator("company_name", mode="before")
    @classmethod
    def coerce_company_name(cls, v):
        if v is None or not str(v).strip():
            return "the company"
        return str(v)
    
    @field_validator("cod_received", "company_approved_exception", mode="before")
    @classmethod
    def coerce_flag(cls, v):
        if isinstance(v, str):
            return v.strip().lower() in ("true", "1", "yes")
        return bool(v)


class PreDeliveryCheck(BaseModel):
    """Advisory decision shown to the driver before unloading."""
    carrier_rate: Decimal
    customer_balance: Decimal
    shortfall: Decimal
    trust_level: TrustLevel
    is_trusted: bool
    requires_cod: bool
    cod_amount_required: Decimal
    status_message: str
    action_required: str
    alert_level: AlertLevel


# =============================================================================
# DRIVER PAY
# =============================================================================


class DriverPayPlan(BaseModel):
    """A driver's pay plan. Only the fields of the selected mode are read."""
    pay_mode: Optional[str] = None
    rate_per_mile: Decimal = Decimal("0")
    rate_per_cuft: Decimal = Decimal("0")
    percent_of_revenue: Decimal = Decimal("0")
    flat_daily_rate: Decimal = Decimal("0")
    
    @field_validator("rate_per_mile", "rate_per_cuft", "percent_of_revenue", "flat_daily_rate", mode="before")
    @classmethod
    def coerce_rate(cls, v):
        return to_decimal(v)
    
    @field_validator("pay_mode", mode="before")
    @classmethod
    def coerce_pay_mode(cls, v):
        if v is None:
            return None
        if isinstance(v, PayMode):
            return v.value
        return str(v)


class TripMetrics(BaseModel):
    """Trip aggregates feeding driver pay."""
    actual_miles: Decimal = Decimal("0")
    total_cuft_loaded: Decimal = Decimal("0")
    revenue_base: Decimal = Decimal("0")
    days_worked: Decimal = Decimal("1")
    
    @field_validator("*", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return to_decimal(v)


class PayItem(BaseModel):
    """A named driver pay line."""
    description: str
    amount: Decimal


class DriverPayResult(BaseModel):
    """Driver pay line items and their sum."""
    pay_mode: Optional[str] = None
    items: List[PayItem] = []
    total: Decimal = Decimal("0")
