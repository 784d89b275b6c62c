"""Application service: Update Product rates use case."""

from __future__ import annotations

from rms.domain.exceptions import NotFoundError
from rms.domain.model.product import Product
from rms.domain.model.value_objects import Money
from rms.domain.repository.unit_of_work import UnitOfWork


class UpdateProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        product_id: str,
        base_rate: str | None = None,
        late_fee_per_day: str | None = None,
    ) -> Product:
        with self._uow:
            product = self._uow.products.get_by_id(product_id)
            if product is None:
                raise NotFoundError(f"Product {product_id} not found")

            product.update_rates(
                base_rate=Money.of(base_rate) if base_rate is not None else None,
                late_fee_per_day=Money.of(late_fee_per_day) if late_fee_per_day is not None else None,
            )
            self._uow.products.save(product)
            self._uow.commit()
        return product
