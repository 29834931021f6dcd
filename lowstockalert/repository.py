"""
Read-only query surface over the inventory store.

The pipeline depends on the abstract InventoryRepository only; the SQLAlchemy
implementation below is what the HTTP app wires in.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError

from .exceptions import RepositoryError
from .models import (
    Inventory,
    InventoryHistory,
    Product,
    ProductSupplier,
    Supplier,
    Warehouse,
)
from .schemas import InventoryPosition, SupplierRef

logger = logging.getLogger(__name__)


class InventoryRepository(ABC):

    @abstractmethod
    def fetch_low_stock_positions(self, company_id: int) -> List[InventoryPosition]:
        """
        Return every position of the company whose stock is strictly below
        its threshold, with the primary supplier attached when one exists.
        No ordering is guaranteed.
        """

    @abstractmethod
    def fetch_recent_sales_total(
        self, product_id: int, warehouse_id: int, since: datetime, until: Optional[datetime] = None
    ) -> int:
        """Return units sold for one position in ``[since, until)``; 0 if none.
        Without ``until`` the window is open-ended."""


class SqlInventoryRepository(InventoryRepository):
    """
    SQLAlchemy-backed repository.

    Each call opens its own session from ``session_factory`` so a single
    instance can be shared by concurrent per-candidate lookups. The session
    is only ever read from.
    """

    def __init__(self, session_factory, sale_kind=InventoryHistory.SALE):
        self._session_factory = session_factory
        self.sale_kind = sale_kind

    def fetch_low_stock_positions(self, company_id):
        stmt = (
            select(
                Product.id.label("product_id"),
                Product.name.label("product_name"),
                Product.sku,
                Product.low_stock_threshold.label("threshold"),
                Inventory.warehouse_id,
                Warehouse.name.label("warehouse_name"),
                Inventory.quantity.label("current_stock"),
                Supplier.id.label("supplier_id"),
                Supplier.name.label("supplier_name"),
                Supplier.contact_email,
            )
            .select_from(Inventory)
            .join(Product, Inventory.product_id == Product.id)
            .join(Warehouse, Inventory.warehouse_id == Warehouse.id)
            .outerjoin(
                ProductSupplier,
                and_(
                    ProductSupplier.product_id == Product.id,
                    ProductSupplier.is_primary.is_(True),
                ),
            )
            .outerjoin(Supplier, ProductSupplier.supplier_id == Supplier.id)
            .where(
                Warehouse.company_id == company_id,
                Inventory.quantity < Product.low_stock_threshold,
            )
            # Stable across calls; not a ranking.
            .order_by(Inventory.id, ProductSupplier.supplier_id)
        )

        try:
            with self._session_factory() as session:
                rows = session.execute(stmt).all()
        except SQLAlchemyError as exc:
            logger.debug(f"Low stock query failed for company {company_id}: {exc}")
            raise RepositoryError("Failed to fetch low stock positions") from exc

        positions = {}
        for row in rows:
            key = (row.product_id, row.warehouse_id)
            # Several primary suppliers for one product: keep the first row.
            if key in positions:
                continue

            supplier = None
            if row.supplier_id is not None:
                supplier = SupplierRef(
                    id=row.supplier_id,
                    name=row.supplier_name,
                    contact_email=row.contact_email,
                )

            positions[key] = InventoryPosition(
                product_id=row.product_id,
                product_name=row.product_name,
                sku=row.sku,
                warehouse_id=row.warehouse_id,
                warehouse_name=row.warehouse_name,
                current_stock=row.current_stock,
                threshold=row.threshold,
                supplier=supplier,
            )

        logger.debug(f"Company {company_id}: {len(positions)} positions below threshold")
        return list(positions.values())

    def fetch_recent_sales_total(self, product_id, warehouse_id, since, until=None):
        stmt = (
            select(func.coalesce(func.sum(func.abs(InventoryHistory.quantity_delta)), 0))
            .select_from(InventoryHistory)
            .join(Inventory, InventoryHistory.inventory_id == Inventory.id)
            .where(
                Inventory.product_id == product_id,
                Inventory.warehouse_id == warehouse_id,
                InventoryHistory.kind == self.sale_kind,
                InventoryHistory.created_at >= since,
            )
        )
        if until is not None:
            stmt = stmt.where(InventoryHistory.created_at < until)

        try:
            with self._session_factory() as session:
                total = session.execute(stmt).scalar_one()
        except SQLAlchemyError as exc:
            logger.debug(f"Sales lookup failed for product {product_id} in warehouse {warehouse_id}: {exc}")
            raise RepositoryError("Failed to fetch recent sales") from exc

        return int(total)
