"""SQLAlchemy implementation of ProductRepository."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.infrastructure.database.schema import ProductRow


class SqlProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        row = self._session.execute(
            select(ProductRow).where(ProductRow.id == product_id)
        ).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        rows = self._session.execute(
            select(ProductRow).order_by(ProductRow.name)
        ).scalars()
        return [self._to_domain(row) for row in rows]

    def decrement_stock(self, product_id: str, quantity: int) -> bool:
        # Check and decrement in one statement; the row count is the verdict.
        result = self._session.execute(
            update(ProductRow)
            .where(
                ProductRow.id == product_id,
                ProductRow.is_active.is_(True),
                ProductRow.stock >= quantity,
            )
            .values(stock=ProductRow.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def increment_stock(self, product_id: str, quantity: int) -> bool:
        result = self._session.execute(
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .values(stock=ProductRow.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            price=Money.of(row.price),
            stock=row.stock,
            is_active=row.is_active,
            sku=row.sku,
        )
