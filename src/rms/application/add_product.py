"""Application service: Add Product use case."""

from __future__ import annotations

from rms.domain.exceptions import ValidationError
from rms.domain.model.product import Product, RentalUnit
from rms.domain.model.value_objects import Money
from rms.domain.repository.unit_of_work import UnitOfWork


class AddProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        total_quantity: int,
        base_rate: str,
        rental_unit: str = "day",
        late_fee_per_day: str | None = None,
    ) -> Product:
        """Add a new rentable product to the catalog."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        try:
            unit = RentalUnit(rental_unit)
        except ValueError as exc:
            raise ValidationError(f"Unknown rental unit '{rental_unit}'") from exc

        rate = Money.of(base_rate)
        if rate.is_zero:
            raise ValidationError("Base rate must be greater than zero")

        with self._uow:
            existing = self._uow.products.get_by_name(name.strip())
            if existing is not None:
                raise ValidationError(f"Product '{name}' already exists")

            # Auto-assign ID based on existing products
            all_products = self._uow.products.list_all()
            if all_products:
                next_id = str(max(int(p.id) for p in all_products) + 1)
            else:
                next_id = "1"

            product = Product(
                id=next_id,
                name=name.strip(),
                total_quantity=total_quantity,
                base_rate=rate,
                rental_unit=unit,
                late_fee_per_day=Money.of(late_fee_per_day) if late_fee_per_day else None,
            )
            self._uow.products.save(product)
            self._uow.commit()
        return product
