from .schemas import SupplierRef


class SupplierResolver:
    """Primary supplier for a position, or the explicit "none" sentinel."""

    def resolve(self, position) -> SupplierRef:
        if position.supplier is None:
            return SupplierRef.none()
        return position.supplier
