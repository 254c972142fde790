from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agroshop.main import app
from agroshop.auth.security import get_current_active_user
from agroshop.db.init import init_db
from agroshop.db.session import Base, get_db
from agroshop.models.account import CustomerAccount
from agroshop.models.farmer import Farmer
from agroshop.models.product import Product


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def admin_user():
    return SimpleNamespace(id=1, username="owner", role="admin", is_active=True)


@pytest.fixture
def staff_user():
    return SimpleNamespace(id=2, username="clerk", role="staff", is_active=True)


@pytest.fixture
def client(session_factory, admin_user):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_active_user] = lambda: admin_user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def staff_client(client, staff_user):
    app.dependency_overrides[get_current_active_user] = lambda: staff_user
    return client


@pytest.fixture
def farmer_with_account(db):
    def make(name="Ramesh", balance=0, rate=2):
        farmer = Farmer(name=name, village="Kothur")
        farmer.account = CustomerAccount(
            current_balance=balance, interest_rate=rate, total_credit_limit=5000
        )
        db.add(farmer)
        db.commit()
        db.refresh(farmer)
        return farmer

    return make


@pytest.fixture
def product(db):
    item = Product(
        name="Urea 45kg", type="fertilizer", price_per_unit=266.50,
        unit="bag", stock_quantity=40, reorder_level=10,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item
