"""HTTP tests for GET /api/companies/<company_id>/alerts/low-stock."""

import pytest

from lowstockalert.app import create_app
from lowstockalert.models import InventoryHistory

from tests.fakes import FakeRepository, make_position

URL = "/api/companies/{}/alerts/low-stock"


@pytest.fixture
def stocked_company(seed):
    """
    One company with:
    - WID-1: 5 left of 20, 60 sold in 30 days, primary supplier  -> alert, 3 days
    - WID-2: 8 left of 10, no recent sales                        -> suppressed
    - WID-3: 50 left of 10, plenty of sales                       -> not low
    - WID-4: 0 left of 10, 15 sold, no primary supplier           -> alert, 0 days
    """
    company = seed.company()
    warehouse = seed.warehouse(company, name="Main")
    supplier = seed.supplier(company, name="Supplier Corp", contact_email="orders@supplier.example")

    wid1 = seed.product(company, "WID-1", threshold=20, name="Widget A")
    seed.link(wid1, supplier)
    inv1 = seed.stock(wid1, warehouse, 5)
    seed.ledger(inv1, -40, days_ago=3)
    seed.ledger(inv1, -20, days_ago=10)
    seed.ledger(inv1, 200, days_ago=12, kind=InventoryHistory.RECEIVE)

    wid2 = seed.product(company, "WID-2", threshold=10)
    inv2 = seed.stock(wid2, warehouse, 8)
    seed.ledger(inv2, -30, days_ago=45)

    wid3 = seed.product(company, "WID-3", threshold=10)
    inv3 = seed.stock(wid3, warehouse, 50)
    seed.ledger(inv3, -90, days_ago=2)

    wid4 = seed.product(company, "WID-4", threshold=10)
    inv4 = seed.stock(wid4, warehouse, 0)
    seed.ledger(inv4, -15, days_ago=4)

    return company, warehouse, supplier


class TestLowStockEndpoint:

    def test_returns_admitted_alerts(self, client, stocked_company):
        company, warehouse, supplier = stocked_company

        response = client.get(URL.format(company.id))

        assert response.status_code == 200
        body = response.get_json()
        assert body["total_alerts"] == 2
        assert [a["sku"] for a in body["alerts"]] == ["WID-1", "WID-4"]

        first = body["alerts"][0]
        assert isinstance(first.pop("product_id"), int)
        assert first == {
            "product_name": "Widget A",
            "sku": "WID-1",
            "warehouse_id": warehouse.id,
            "warehouse_name": "Main",
            "current_stock": 5,
            "threshold": 20,
            "days_until_stockout": 3,
            "avg_daily_sales": 2.0,
            "urgency": "critical",
            "supplier": {
                "id": supplier.id,
                "name": "Supplier Corp",
                "contact_email": "orders@supplier.example",
            },
        }

        stocked_out = body["alerts"][1]
        assert stocked_out["days_until_stockout"] == 0
        assert stocked_out["supplier"] == {"id": None, "name": "No Primary Supplier", "contact_email": None}

    def test_no_candidates_is_empty_success(self, client, seed):
        company = seed.company()

        response = client.get(URL.format(company.id))

        assert response.status_code == 200
        assert response.get_json() == {"alerts": [], "total_alerts": 0}

    def test_repeated_requests_match(self, client, stocked_company):
        company = stocked_company[0]

        assert client.get(URL.format(company.id)).get_json() == client.get(URL.format(company.id)).get_json()

    @pytest.mark.parametrize("company_id", ["abc", "0", "-4", "1.5", "99999999999999999999999"])
    def test_invalid_company_id_is_400(self, settings, make_service, company_id):
        repo = FakeRepository()
        app = create_app(settings=settings, service=make_service(repo))

        response = app.test_client().get(URL.format(company_id))

        assert response.status_code == 400
        assert "error" in response.get_json()
        assert repo.calls == []

    def test_store_unreachable_is_500(self, settings, make_service):
        app = create_app(settings=settings, service=make_service(FakeRepository(fail_fetch=True)))

        response = app.test_client().get(URL.format(1))

        assert response.status_code == 500
        body = response.get_json()
        assert body["error"] == "An error occurred while generating alerts"
        assert "alerts" not in body
        assert "store unreachable" not in body["error"]
        assert body["request_id"]

    def test_failed_candidate_lookup_is_500(self, settings, make_service):
        repo = FakeRepository(
            positions=[make_position(product_id=1), make_position(product_id=2)],
            totals={(1, 1): 30},
            failing={(2, 1)},
        )
        app = create_app(settings=settings, service=make_service(repo))

        response = app.test_client().get(URL.format(1))

        assert response.status_code == 500
        assert "alerts" not in response.get_json()


    def test_future_dated_sales_do_not_admit_a_position(self, client, seed):
        company = seed.company()
        warehouse = seed.warehouse(company)
        product = seed.product(company, "WID-9", threshold=10)
        inventory = seed.stock(product, warehouse, 3)
        seed.ledger(inventory, -500, days_ago=-1)

        response = client.get(URL.format(company.id))

        assert response.status_code == 200
        assert response.get_json() == {"alerts": [], "total_alerts": 0}


class TestInitDb:

    def test_creates_tables(self, tmp_path):
        from sqlalchemy import create_engine, inspect

        from lowstockalert.config import Settings

        url = f"sqlite:///{tmp_path / 'fresh.db'}"
        app = create_app(settings=Settings(database_url=url))

        result = app.test_cli_runner().invoke(args=["init-db"])

        assert result.exit_code == 0
        tables = set(inspect(create_engine(url)).get_table_names())
        assert {"companies", "warehouses", "products", "inventory", "inventory_history"} <= tables

