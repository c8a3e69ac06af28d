"""SQLAlchemy implementation of OrderRepository.

Status changes are single conditional UPDATE statements so that two
racing writers can never both move the same order out of a status.
"""

from __future__ import annotations

from datetime import timezone

from sqlalchemy import Select, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.domain.exceptions import DuplicateOrderNumberError, DuplicateRequestError
from storefront.domain.model.order import Order, OrderItem
from storefront.domain.model.order_status import OrderStatus, PaymentStatus
from storefront.domain.model.pricing import PriceBreakdown
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.infrastructure.database.schema import OrderItemRow, OrderRow


class SqlOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> None:
        row = OrderRow(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            address_id=order.address_id,
            status=order.status.value,
            payment_status=order.payment_status.value,
            subtotal=order.subtotal.amount,
            shipping_cost=order.shipping_cost.amount,
            tax_amount=order.tax_amount.amount,
            total_amount=order.total_amount.amount,
            payment_method=order.payment_method,
            notes=order.notes,
            idempotency_key=order.idempotency_key,
            created_at=order.created_at,
            updated_at=order.created_at,
            items=[
                OrderItemRow(
                    id=item.id,
                    product_id=item.product_id,
                    quantity=item.quantity.value,
                    price=item.unit_price.amount,
                    size=item.size,
                    color=item.color,
                )
                for item in order.items
            ],
        )
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            detail = str(exc.orig)
            if "order_number" in detail:
                raise DuplicateOrderNumberError(order.order_number) from exc
            if "idempotency_key" in detail:
                raise DuplicateRequestError(order.user_id, order.idempotency_key) from exc
            raise

    def get_by_id(self, order_id: str, user_id: str | None = None) -> Order | None:
        stmt = select(OrderRow).where(OrderRow.id == order_id)
        if user_id is not None:
            stmt = stmt.where(OrderRow.user_id == user_id)
        row = self._session.execute(stmt).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def get_by_idempotency_key(self, user_id: str, key: str) -> Order | None:
        row = self._session.execute(
            select(OrderRow).where(
                OrderRow.user_id == user_id,
                OrderRow.idempotency_key == key,
            )
        ).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def list_page(
        self,
        user_id: str | None,
        status: OrderStatus | None,
        offset: int,
        limit: int,
    ) -> list[Order]:
        stmt = self._filtered(select(OrderRow), user_id, status)
        stmt = (
            stmt.order_by(OrderRow.created_at.desc(), OrderRow.order_number.desc())
            .offset(offset)
            .limit(limit)
        )
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    def count(self, user_id: str | None, status: OrderStatus | None) -> int:
        stmt = self._filtered(select(func.count(OrderRow.id)), user_id, status)
        return self._session.execute(stmt).scalar_one()

    def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        expected: OrderStatus | None = None,
    ) -> bool:
        stmt = update(OrderRow).where(OrderRow.id == order_id)
        if expected is not None:
            stmt = stmt.where(OrderRow.status == expected.value)
        result = self._session.execute(
            stmt.values(status=status.value).execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def update_payment_status(
        self,
        order_id: str,
        status: PaymentStatus,
        expected: PaymentStatus | None = None,
    ) -> bool:
        stmt = update(OrderRow).where(OrderRow.id == order_id)
        if expected is not None:
            stmt = stmt.where(OrderRow.payment_status == expected.value)
        result = self._session.execute(
            stmt.values(payment_status=status.value).execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _filtered(stmt: Select, user_id: str | None, status: OrderStatus | None) -> Select:
        if user_id is not None:
            stmt = stmt.where(OrderRow.user_id == user_id)
        if status is not None:
            stmt = stmt.where(OrderRow.status == status.value)
        return stmt

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        created_at = row.created_at
        if created_at.tzinfo is None:
            # SQLite hands back naive datetimes; they were written as UTC.
            created_at = created_at.replace(tzinfo=timezone.utc)

        items = [
            OrderItem(
                id=item.id,
                product_id=item.product_id,
                quantity=Quantity(item.quantity),
                unit_price=Money.of(item.price),
                size=item.size,
                color=item.color,
                product_name=item.product.name if item.product is not None else None,
            )
            for item in row.items
        ]

        return Order(
            id=row.id,
            order_number=row.order_number,
            user_id=row.user_id,
            address_id=row.address_id,
            items=items,
            pricing=PriceBreakdown(
                subtotal=Money.of(row.subtotal),
                shipping_cost=Money.of(row.shipping_cost),
                tax_amount=Money.of(row.tax_amount),
            ),
            payment_method=row.payment_method,
            notes=row.notes,
            status=OrderStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            idempotency_key=row.idempotency_key,
            created_at=created_at,
        )
