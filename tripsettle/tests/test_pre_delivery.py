"""
Tests for the pre-delivery COD evaluator.
"""
import pytest
from decimal import Decimal
from tripsettle.core.exceptions import NotFoundError
from tripsettle.models.company import TrustLevel
from tripsettle.schemas.financials import AlertLevel
from tripsettle.services.pre_delivery import (
    generate_pre_delivery_check, get_load_pre_delivery_check, requires_cod_payment
)
from tripsettle.tests.conftest import OTHER_OWNER_ID, OWNER_ID


def check_input(**overrides):
    # carrier rate = 400 x 1.75 + 100 = 800
    values = {
        "actual_cuft_loaded": 400,
        "rate_per_cuft": "1.75",
        "contract_accessorials_total": 100,
        "balance_due_on_delivery": 500,
        "trust_level": "cod_required",
        "company_name": "Acme Van Lines",
    }
    values.update(overrides)
    return values


class TestGeneratePreDeliveryCheck:
    
    def test_scenario_b_cod_required_blocks_unload(self):
        check = generate_pre_delivery_check(check_input())
        
        assert check.carrier_rate == Decimal("800.00")
        assert check.customer_balance == Decimal("500")
        assert check.shortfall == Decimal("300.00")
        assert check.is_trusted is False
        assert check.requires_cod is True
        assert check.cod_amount_required == Decimal("300.00")
        assert check.alert_level == AlertLevel.DANGER
        assert check.action_required == "DO NOT UNLOAD until you receive $300.00 from Acme Van Lines"
        assert "BEFORE you unload" in check.status_message
    
    def test_scenario_c_trusted_company_pays_later(self):
        check = generate_pre_delivery_check(check_input(trust_level="trusted"))
        
        assert check.requires_cod is False
        assert check.cod_amount_required == Decimal("0.00")
        assert check.alert_level == AlertLevel.SUCCESS
        assert check.status_message == "TRUSTED - Acme Van Lines will pay you $300.00 after delivery"
        assert check.action_required == "Collect $500.00 from customer, then complete delivery"
    
    def test_trusted_without_shortfall(self):
        check = generate_pre_delivery_check(check_input(trust_level="trusted", balance_due_on_delivery=900))
        assert check.status_message == "Customer balance covers your rate"
        assert check.action_required == "Collect $900.00 from customer"
    
    def test_cod_received_wins_first(self):
        check = generate_pre_delivery_check(check_input(cod_received=True, company_approved_exception=True))
        
        assert check.requires_cod is False
        assert check.cod_amount_required == Decimal("0.00")
        assert check.alert_level == AlertLevel.SUCCESS
        assert check.status_message == "COD of $300.00 received from Acme Van Lines"
        assert check.action_required == "Collect $500.00 from customer and complete delivery"
    
    def test_company_exception(self):
        check = generate_pre_delivery_check(check_input(company_approved_exception=True, balance_due_on_delivery=0))
        
        assert check.requires_cod is False
        assert check.status_message == "Acme Van Lines approved delivery without COD"
        assert check.action_required == "Complete delivery"
    
    def test_cod_required_without_shortfall(self):
        check = generate_pre_delivery_check(check_input(balance_due_on_delivery=800))
        
        assert check.shortfall == Decimal("0.00")
        assert check.requires_cod is False
        assert check.alert_level == AlertLevel.SUCCESS
        assert check.status_message == "Customer balance covers your rate - no COD needed"
    
    @pytest.mark.parametrize("balance", ["800", "800.01", "1000", "25000"])
    def test_no_cod_once_balance_covers_rate(self, balance):
        check = generate_pre_delivery_check(check_input(balance_due_on_delivery=balance))
        assert check.requires_cod is False
    
    @pytest.mark.parametrize("balance", ["0", "1", "500", "799.99"])
    def test_cod_whenever_shortfall_is_positive(self, balance):
        check = generate_pre_delivery_check(check_input(balance_due_on_delivery=balance))
        assert check.requires_cod is True
        assert check.cod_amount_required == check.shortfall
    
    @pytest.mark.parametrize("balance", ["0", "500", "799.99", "800", "2000"])
    @pytest.mark.parametrize("cod_received", [True, False])
    @pytest.mark.parametrize("exception", [True, False])
    def test_trusted_never_requires_cod(self, balance, cod_received, exception):
        check = generate_pre_delivery_check(check_input(
            trust_level=TrustLevel.TRUSTED,
            balance_due_on_delivery=balance,
            cod_received=cod_received,
            company_approved_exception=exception,
        ))
        assert check.is_trusted is True
        assert check.requires_cod is False
        assert check.alert_level == AlertLevel.SUCCESS
    
    def test_contract_rate_preferred_over_list_rate(self):
        check = generate_pre_delivery_check(check_input(contract_rate_per_cuft="2.00"))
        assert check.carrier_rate == Decimal("900.00")
        assert check.shortfall == Decimal("400.00")
    
    def test_extras_and_storage_are_not_part_of_rate(self):
        check = generate_pre_delivery_check(check_input(extra_shuttle=75, storage_move_in_fee=40))
        assert check.carrier_rate == Decimal("800.00")
    
    def test_unknown_trust_level_treated_as_cod_required(self):
        check = generate_pre_delivery_check(check_input(trust_level="gold"))
        assert check.trust_level == TrustLevel.COD_REQUIRED
        assert check.requires_cod is True
    
    def test_garbage_input_still_returns_a_decision(self):
        check = generate_pre_delivery_check({
            "actual_cuft_loaded": "lots",
            "rate_per_cuft": None,
            "balance_due_on_delivery": "n/a",
            "trust_level": None,
            "company_name": None,
        })
        assert check.carrier_rate == Decimal("0.00")
        assert check.requires_cod is False
        assert check.action_required == "Complete delivery"
    
    def test_evaluation_is_repeatable(self):
        assert generate_pre_delivery_check(check_input()) == generate_pre_delivery_check(check_input())
    
    def test_oversized_balance_falls_back_to_blocking_unload(self):
        check = generate_pre_delivery_check(check_input(balance_due_on_delivery=1e30))
        
        assert check.customer_balance == Decimal("0")
        assert check.requires_cod is True
        assert check.cod_amount_required == Decimal("800.00")


class TestRequiresCodPayment:
    
    def test_trusted(self):
        assert requires_cod_payment(TrustLevel.TRUSTED, 800, 100) is False
        assert requires_cod_payment("trusted", 800, 100) is False
    
    def test_cod_required(self):
        assert requires_cod_payment(TrustLevel.COD_REQUIRED, 800, 500) is True
        assert requires_cod_payment("cod_required", 800, 800) is False


class TestStoredLoadCheck:
    
    def test_uses_company_trust_and_cod_state(self, db, factory):
        company = factory.company("Acme Van Lines", TrustLevel.COD_REQUIRED)
        load = factory.load(
            company=company,
            actual_cuft_loaded=Decimal("400"),
            rate_per_cuft=Decimal("1.75"),
            contract_accessorials_stairs=Decimal("60"),
            contract_accessorials_packing=Decimal("40"),
            extra_shuttle=Decimal("75"),
            balance_due_on_delivery=Decimal("500"),
        )
        
        check = get_load_pre_delivery_check(load.id, OWNER_ID, db)
        assert check.carrier_rate == Decimal("800.00")
        assert check.requires_cod is True
        
        load.cod_received = True
        db.commit()
        check = get_load_pre_delivery_check(load.id, OWNER_ID, db)
        assert check.requires_cod is False
        
        company.trust_level = TrustLevel.TRUSTED
        load.cod_received = False
        db.commit()
        check = get_load_pre_delivery_check(load.id, OWNER_ID, db)
        assert check.is_trusted is True
        assert check.requires_cod is False
    
    def test_load_without_company_is_cod_required(self, db, factory):
        load = factory.load(actual_cuft_loaded=Decimal("100"), rate_per_cuft=Decimal("2"))
        check = get_load_pre_delivery_check(load.id, OWNER_ID, db)
        assert check.requires_cod is True
        assert "the company" in check.action_required
    
    def test_other_owner(self, db, factory):
        load = factory.load(owner_id=OTHER_OWNER_ID)
        with pytest.raises(NotFoundError):
            get_load_pre_delivery_check(load.id, OWNER_ID, db)
