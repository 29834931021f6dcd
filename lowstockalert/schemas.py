"""
Read projections and derived values that flow through the alert pipeline.

None of these are persisted: positions are materialized per query, velocity
estimates and projections live for a single alert computation, and an
AlertBatch is discarded once the response is sent.
"""

from dataclasses import dataclass
from typing import Optional

NO_PRIMARY_SUPPLIER = "No Primary Supplier"


@dataclass(frozen=True)
class SupplierRef:
    id: Optional[int]
    name: str
    contact_email: Optional[str]

    @classmethod
    def none(cls) -> "SupplierRef":
        """Sentinel for a product with no primary supplier row."""
        return cls(id=None, name=NO_PRIMARY_SUPPLIER, contact_email=None)

    def to_dict(self):
        return {"id": self.id, "name": self.name, "contact_email": self.contact_email}


@dataclass(frozen=True)
class InventoryPosition:
    """One (product, warehouse) pair as read from the store."""

    product_id: int
    product_name: str
    sku: str
    warehouse_id: int
    warehouse_name: str
    current_stock: int
    threshold: int
    # Result of the primary-supplier left join; None when no row matched.
    supplier: Optional[SupplierRef] = None

    @property
    def key(self):
        return (self.product_id, self.warehouse_id)


@dataclass(frozen=True)
class VelocityEstimate:
    total_units_sold: int
    window_days: int
    average_daily_rate: float


@dataclass(frozen=True)
class Projection:
    included: bool
    days_until_stockout: Optional[int] = None

    @classmethod
    def excluded(cls) -> "Projection":
        return cls(included=False)


@dataclass(frozen=True)
class Alert:
    product_id: int
    product_name: str
    sku: str
    warehouse_id: int
    warehouse_name: str
    current_stock: int
    threshold: int
    days_until_stockout: int
    average_daily_sales: float
    urgency: str
    supplier: SupplierRef

    @classmethod
    def from_position(cls, position, projection, velocity, supplier, urgency):
        return cls(
            product_id=position.product_id,
            product_name=position.product_name,
            sku=position.sku,
            warehouse_id=position.warehouse_id,
            warehouse_name=position.warehouse_name,
            current_stock=position.current_stock,
            threshold=position.threshold,
            days_until_stockout=projection.days_until_stockout,
            average_daily_sales=velocity.average_daily_rate,
            urgency=urgency,
            supplier=supplier,
        )

    def to_dict(self):
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "sku": self.sku,
            "warehouse_id": self.warehouse_id,
            "warehouse_name": self.warehouse_name,
            "current_stock": self.current_stock,
            "threshold": self.threshold,
            "days_until_stockout": self.days_until_stockout,
            "avg_daily_sales": round(self.average_daily_sales, 2),
            "urgency": self.urgency,
            "supplier": self.supplier.to_dict(),
        }


@dataclass(frozen=True)
class AlertBatch:
    alerts: tuple = ()

    @property
    def total_alerts(self) -> int:
        return len(self.alerts)

    def to_dict(self):
        return {
            "alerts": [alert.to_dict() for alert in self.alerts],
            "total_alerts": self.total_alerts,
        }
