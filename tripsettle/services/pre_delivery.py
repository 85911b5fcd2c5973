"""
Pre-delivery COD evaluator.

The decision a driver sees before unloading:
- TRUSTED companies: deliver, collect the customer balance, the company pays
  any shortfall afterwards.
- COD REQUIRED companies: the company must pay the shortfall BEFORE unloading.

All live state (trust level, COD received, approved exception) is passed in;
the evaluator reads nothing else and writes nothing.
"""
from decimal import Decimal
from typing import Any, Mapping, Union
from sqlalchemy.orm import Session
from tripsettle.core.utils import round_money, to_decimal, format_money
from tripsettle.models.company import TrustLevel
from tripsettle.schemas.financials import AlertLevel, PreDeliveryCheckInput, PreDeliveryCheck
from tripsettle.services.financial_inputs import resolve_load, pre_delivery_input


def _collect_then_deliver(customer_balance: Decimal, then: str = " and complete delivery") -> str:
    if customer_balance > 0:
        return f"Collect {format_money(customer_balance)} from customer{then}"
    return "Complete delivery"


def generate_pre_delivery_check(
    data: Union[PreDeliveryCheckInput, Mapping[str, Any]]
) -> PreDeliveryCheck:
    """
    Decide whether COD must be collected before unloading.
    
    Rules are evaluated in order, first match wins:
    1. COD already received
    2. Company approved an exception
    3. Company is trusted
    4. COD required: block unloading while there is a shortfall
    """
    if not isinstance(data, PreDeliveryCheckInput):
        data = PreDeliveryCheckInput.model_validate(dict(data or {}))
    
    rate_per_cuft = data.contract_rate_per_cuft or data.rate_per_cuft
    customer_balance = data.balance_due_on_delivery
    
    # Extras and storage are day-of charges, not part of the agreed rate
    carrier_rate = round_money(data.actual_cuft_loaded * rate_per_cuft + data.contract_accessorials_total)
    shortfall = round_money(carrier_rate - customer_balance)
    
    is_trusted = data.trust_level == TrustLevel.TRUSTED
    requires_cod = (
        not is_trusted
        and shortfall > 0
        and not data.cod_received
        and not data.company_approved_exception
    )
    cod_amount_required = shortfall if requires_cod else round_money(0)
    
    company = data.company_name
    alert_level = AlertLevel.SUCCESS
    
    if data.cod_received:
        status_message = f"COD of {format_money(shortfall)} received from {company}"
        action_required = _collect_then_deliver(customer_balance)
    elif data.company_approved_exception:
        status_message = f"{company} approved delivery without COD"
        action_required = _collect_then_deliver(customer_balance)
    elif is_trusted:
        if shortfall > 0:
            status_message = f"TRUSTED - {company} will pay you {format_money(shortfall)} after delivery"
            action_required = _collect_then_deliver(customer_balance, ", then complete delivery")
        else:
            status_message = "Customer balance covers your rate"
            action_required = _collect_then_deliver(customer_balance, "")
    elif shortfall > 0:
        status_message = f"COD REQUIRED - {company} must pay {format_money(shortfall)} BEFORE you unload"
        action_required = f"DO NOT UNLOAD until you receive {format_money(shortfall)} from {company}"
        alert_level = AlertLevel.DANGER
    else:
        status_message = "Customer balance covers your rate - no COD needed"
        action_required = _collect_then_deliver(customer_balance, "")
    
    return PreDeliveryCheck(
        carrier_rate=carrier_rate,
        customer_balance=customer_balance,
        shortfall=shortfall,
        trust_level=data.trust_level,
        is_trusted=is_trusted,
        requires_cod=requires_cod,
        cod_amount_required=cod_amount_required,
        status_message=status_message,
        action_required=action_required,
        alert_level=alert_level,
    )


def requires_cod_payment(trust_level: Any, carrier_rate: Any, customer_balance: Any) -> bool:
    """Quick check whether a company/load combination needs COD, ignoring overrides."""
    if trust_level == TrustLevel.TRUSTED or trust_level == TrustLevel.TRUSTED.value:
        return False
    return to_decimal(carrier_rate) - to_decimal(customer_balance) > 0


def get_load_pre_delivery_check(load_id: int, owner_id: int, db: Session) -> PreDeliveryCheck:
    """Run the pre-delivery check against a stored load and its company's live state."""
    load = resolve_load(load_id, owner_id, db)
    return generate_pre_delivery_check(pre_delivery_input(load))
