"""
Tests for settlement reporting.
"""
import pytest
from datetime import date, datetime
from decimal import Decimal
from tripsettle.core.config import settings
from tripsettle.core.exceptions import NotFoundError
from tripsettle.models import Receivable, ReceivableStatus, SettlementStatus
from tripsettle.services import finance_service
from tripsettle.services.settlement_service import create_trip_settlement, finalize_trip_settlement
from tripsettle.tests.conftest import OWNER_ID


def settle_simple_trip(factory, company, cuft):
    trip = factory.trip(trip_number=f"T-{cuft}")
    factory.load(trip, company, actual_cuft_loaded=Decimal(cuft), rate_per_cuft=Decimal("1.00"))
    return trip


def test_empty_summary(db):
    summary = finance_service.get_finance_summary(OWNER_ID, db)
    
    assert summary.total_revenue == Decimal("0.00")
    assert summary.total_profit == Decimal("0.00")
    assert summary.open_receivables_count == 0
    assert summary.top_companies == []
    assert summary.recent_trips == []


def test_summary_totals_across_trips(db, factory):
    acme = factory.company("Acme Van Lines")
    beacon = factory.company("Beacon Movers")
    for company, cuft in ((acme, "100"), (beacon, "300"), (acme, "50")):
        trip = settle_simple_trip(factory, company, cuft)
        create_trip_settlement(trip.id, OWNER_ID, db)
    
    summary = finance_service.get_finance_summary(OWNER_ID, db, period_days=30)
    
    assert summary.total_revenue == Decimal("450.00")
    assert summary.open_receivables_amount == Decimal("450.00")
    assert summary.open_receivables_count == 3
    assert [(c.company_name, c.total) for c in summary.top_companies] == [
        ("Beacon Movers", Decimal("300.00")),
        ("Acme Van Lines", Decimal("150.00")),
    ]
    assert len(summary.recent_trips) == 3


def test_summary_top_n_setting(db, factory, monkeypatch):
    monkeypatch.setattr(settings, "FINANCE_SUMMARY_TOP_N", 1)
    for name, cuft in (("Acme Van Lines", "100"), ("Beacon Movers", "300")):
        trip = settle_simple_trip(factory, factory.company(name), cuft)
        create_trip_settlement(trip.id, OWNER_ID, db)
    
    summary = finance_service.get_finance_summary(OWNER_ID, db)
    
    assert [c.company_name for c in summary.top_companies] == ["Beacon Movers"]
    assert len(summary.recent_trips) == 1


def test_paid_receivables_leave_summary(db, factory):
    trip = settle_simple_trip(factory, factory.company(), "100")
    create_trip_settlement(trip.id, OWNER_ID, db)
    for receivable in finance_service.list_receivables(OWNER_ID, db):
        row = db.get(Receivable, receivable.id)
        row.status = ReceivableStatus.PAID
    db.commit()
    
    summary = finance_service.get_finance_summary(OWNER_ID, db)
    
    assert summary.total_revenue == Decimal("100.00")
    assert summary.open_receivables_count == 0
    assert len(finance_service.list_receivables(OWNER_ID, db, status=ReceivableStatus.PAID)) == 1


def test_list_settlements_filters_and_pages(db, factory):
    company = factory.company()
    trips = [settle_simple_trip(factory, company, cuft) for cuft in ("10", "20", "30")]
    for trip in trips:
        create_trip_settlement(trip.id, OWNER_ID, db)
    finalize_trip_settlement(trips[0].id, OWNER_ID, db)
    
    assert len(finance_service.list_trip_settlements(OWNER_ID, db)) == 3
    assert len(finance_service.list_trip_settlements(OWNER_ID, db, limit=2)) == 2
    assert len(finance_service.list_trip_settlements(OWNER_ID, db, limit=2, offset=2)) == 1
    
    finalized = finance_service.list_trip_settlements(OWNER_ID, db, status=SettlementStatus.SETTLED)
    assert [s.trip_id for s in finalized] == [trips[0].id]
    assert finalized[0].closed_at is not None


def test_snapshot_requires_settlement(db, factory):
    trip = factory.trip()
    with pytest.raises(NotFoundError):
        finance_service.get_settlement_snapshot(trip.id, OWNER_ID, db)


def test_snapshot_of_missing_trip(db):
    with pytest.raises(NotFoundError):
        finance_service.get_settlement_snapshot(77, OWNER_ID, db)


def test_list_settlements_by_creation_date(db, factory):
    company = factory.company()
    created = [datetime(2026, 1, 10, 8, 30), datetime(2026, 2, 14, 23, 59), datetime(2026, 3, 1, 0, 0)]
    trips = [settle_simple_trip(factory, company, cuft) for cuft in ("10", "20", "30")]
    for trip, created_at in zip(trips, created):
        settlement = create_trip_settlement(trip.id, OWNER_ID, db)
        settlement.created_at = created_at
    db.commit()
    
    def trip_ids(**bounds):
        return [s.trip_id for s in finance_service.list_trip_settlements(OWNER_ID, db, **bounds)]
    
    assert trip_ids(from_date=date(2026, 2, 1)) == [trips[2].id, trips[1].id]
    assert trip_ids(to_date=date(2026, 2, 14)) == [trips[1].id, trips[0].id]
    assert trip_ids(from_date=date(2026, 2, 14), to_date=date(2026, 2, 14)) == [trips[1].id]
    assert trip_ids(from_date=date(2026, 4, 1)) == []
