"""
Pytest fixtures for the low-stock alert test suite.

Provides:
- a fixed clock so sales windows are deterministic
- SQLite file databases (one per test) with the inventory schema
- a seeding helper for companies, warehouses, products, suppliers, stock and ledger rows
- pipeline and Flask app fixtures
"""

from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from lowstockalert.app import create_app
from lowstockalert.assembler import AlertAssembler
from lowstockalert.config import Settings
from lowstockalert.models import (
    Base,
    Company,
    Inventory,
    InventoryHistory,
    Product,
    ProductSupplier,
    Supplier,
    Warehouse,
)
from lowstockalert.projector import StockoutProjector
from lowstockalert.repository import SqlInventoryRepository
from lowstockalert.service import AlertService
from lowstockalert.suppliers import SupplierResolver
from lowstockalert.velocity import VelocityEstimator

from tests.fakes import NOW


@pytest.fixture
def clock():
    return lambda: NOW


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'inventory.db'}"


@pytest.fixture
def engine(database_url):
    engine = create_engine(database_url)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


class Seeder:
    """Small helper for building store state inside a test."""

    def __init__(self, session):
        self.session = session

    def add(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def company(self, name="Acme Corp"):
        return self.add(Company(name=name))

    def warehouse(self, company, name="Main"):
        return self.add(Warehouse(company_id=company.id, name=name))

    def product(self, company, sku, threshold=20, name=None):
        return self.add(
            Product(company_id=company.id, name=name or f"Widget {sku}", sku=sku, low_stock_threshold=threshold)
        )

    def supplier(self, company, name="Supplier Corp", contact_email="orders@supplier.example"):
        return self.add(Supplier(company_id=company.id, name=name, contact_email=contact_email))

    def link(self, product, supplier, is_primary=True):
        return self.add(ProductSupplier(product_id=product.id, supplier_id=supplier.id, is_primary=is_primary))

    def stock(self, product, warehouse, quantity):
        return self.add(Inventory(product_id=product.id, warehouse_id=warehouse.id, quantity=quantity))

    def ledger(self, inventory, quantity_delta, days_ago, kind=InventoryHistory.SALE):
        return self.add(
            InventoryHistory(
                inventory_id=inventory.id,
                kind=kind,
                quantity_delta=quantity_delta,
                created_at=NOW - timedelta(days=days_ago),
            )
        )


@pytest.fixture
def seed(session_factory):
    session = session_factory(expire_on_commit=False)
    seeder = Seeder(session)
    yield seeder
    session.close()


@pytest.fixture
def repository(session_factory):
    return SqlInventoryRepository(session_factory)


# =============================================================================
# Pipeline fixtures
# =============================================================================


def build_service(repository, clock, max_workers=4, timeout=5.0, window_days=30):
    assembler = AlertAssembler(
        estimator=VelocityEstimator(repository, window_days=window_days, clock=clock),
        projector=StockoutProjector(),
        resolver=SupplierResolver(),
        max_workers=max_workers,
        timeout=timeout,
    )
    return AlertService(repository, assembler)


@pytest.fixture
def settings(database_url):
    return Settings(database_url=database_url, max_workers=4, timeout_seconds=5.0)


@pytest.fixture
def make_service(clock):
    def _make(repository, **kwargs):
        return build_service(repository, clock, **kwargs)

    return _make


@pytest.fixture
def sql_service(repository, clock):
    return build_service(repository, clock)


@pytest.fixture
def client(settings, sql_service):
    app = create_app(settings=settings, service=sql_service)
    app.config["TESTING"] = True
    return app.test_client()
