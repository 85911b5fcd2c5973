"""
Shared fixtures: in-memory database, factories and an API client.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from tripsettle.db.session import get_db, init_db
from tripsettle.main import app
from tripsettle.models import (
    Company, Driver, Load, Trip, TripExpense, TripStatus, TrustLevel
)

OWNER_ID = 1
OTHER_OWNER_ID = 2
HEADERS = {"X-Owner-Id": str(OWNER_ID)}


class Factory:
    """Creates committed rows for tests."""
    
    def __init__(self, db):
        self.db = db
    
    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj
    
    def company(self, name="Acme Van Lines", trust_level=TrustLevel.COD_REQUIRED, owner_id=OWNER_ID):
        return self._save(Company(owner_id=owner_id, name=name, trust_level=trust_level))
    
    def driver(self, pay_mode="per_mile_and_cuft", owner_id=OWNER_ID, **rates):
        return self._save(Driver(
            owner_id=owner_id,
            first_name="Dana",
            last_name="Reyes",
            pay_mode=pay_mode,
            **rates
        ))
    
    def trip(self, driver=None, owner_id=OWNER_ID, status=TripStatus.COMPLETED, **fields):
        values = dict(
            trip_number="T-100",
            start_date=date(2026, 3, 1),
            end_date=date(2026, 3, 3),
            odometer_start=Decimal("10000"),
            odometer_end=Decimal("10400"),
            odometer_start_photo_url="https://files.example.com/odo-start.jpg",
            odometer_end_photo_url="https://files.example.com/odo-end.jpg",
        )
        values.update(fields)
        return self._save(Trip(
            owner_id=owner_id,
            driver_id=driver.id if driver else None,
            status=status,
            **values
        ))
    
    def load(self, trip=None, company=None, owner_id=OWNER_ID, **fields):
        return self._save(Load(
            owner_id=owner_id,
            trip_id=trip.id if trip else None,
            company_id=company.id if company else None,
            **fields
        ))
    
    def expense(self, trip, category, amount, paid_by=None, description=None, owner_id=OWNER_ID):
        return self._save(TripExpense(
            owner_id=owner_id,
            trip_id=trip.id,
            category=category,
            amount=Decimal(str(amount)),
            paid_by=paid_by,
            description=description,
        ))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db
    
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def settled_trip_setup(factory):
    """
    Two companies, a per-mile-and-cuft driver and a mix of expenses.
    
    Load 1 (Acme, COD required): 1000 cuft @ 2.00 contract, stairs 50, extra shuttle 75,
    storage 40 + 10 x 2 days, 500 collected on delivery -> revenue 2185, company owes 1610.
    Load 2 (Beacon, trusted): 200 cuft @ 3.00 list rate, 100 paid to company -> revenue 600, owes 500.
    Driver: 400 miles x 0.55 + 1200 cuft x 0.10 = 340.
    """
    acme = factory.company("Acme Van Lines", TrustLevel.COD_REQUIRED)
    beacon = factory.company("Beacon Movers", TrustLevel.TRUSTED)
    driver = factory.driver(
        pay_mode="per_mile_and_cuft",
        rate_per_mile=Decimal("0.55"),
        rate_per_cuft=Decimal("0.10"),
        percent_of_revenue=Decimal("30"),
    )
    trip = factory.trip(driver=driver)
    factory.load(
        trip, acme,
        load_number="L-1",
        actual_cuft_loaded=Decimal("1000"),
        rate_per_cuft=Decimal("1.50"),
        contract_rate_per_cuft=Decimal("2.00"),
        contract_accessorials_stairs=Decimal("50"),
        extra_shuttle=Decimal("75"),
        storage_move_in_fee=Decimal("40"),
        storage_daily_fee=Decimal("10"),
        storage_days_billed=2,
        amount_collected_on_delivery=Decimal("500"),
    )
    factory.load(
        trip, beacon,
        load_number="L-2",
        actual_cuft_loaded=Decimal("200"),
        rate_per_cuft=Decimal("3.00"),
        amount_paid_directly_to_company=Decimal("100"),
    )
    factory.expense(trip, "fuel", 45, paid_by="driver_personal", description="Diesel Tulsa")
    factory.expense(trip, "tolls", 30, paid_by="company_card")
    factory.expense(trip, "lodging", 80, paid_by="driver_cash", description="Motel")
    factory.expense(trip, "driver_pay", 500, paid_by="company_card")
    return {"trip": trip, "driver": driver, "acme": acme, "beacon": beacon}
