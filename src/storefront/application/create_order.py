"""Application service: Create Order use case.

Turns a cart into a persisted Order, its OrderItems and the matching
stock reservation as one unit of work:

1. Verify the shipping address belongs to the user.
2. Resolve each product and check it is active and in stock (read-only).
3. Build OrderItems with *current* prices (snapshot) and price the cart.
4. Insert the order, then reserve stock through the inventory ledger.
5. Commit.  Any failure before the commit leaves no order, no items and
   no stock change.

The read-only checks in step 2 give the caller a precise error early;
the ledger's conditional decrement in step 4 is what actually guards
against overselling.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from storefront.application.dto import OrderDTO, OrderItemSpec
from storefront.application.show_order import materialize
from storefront.domain.exceptions import (
    AddressNotFoundError,
    DuplicateOrderNumberError,
    DuplicateRequestError,
    InsufficientStockError,
    ProductInactiveError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.domain.model.order import Order, OrderItem
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from storefront.domain.service.inventory_ledger import InventoryLedger
from storefront.domain.service.order_number import generate_order_number

logger = logging.getLogger(__name__)

# One regeneration after a unique-constraint collision on the order number.
ORDER_NUMBER_ATTEMPTS = 2


class CreateOrderHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Callable[[], datetime] | None = None,
        order_number_factory: Callable[[datetime], str] = generate_order_number,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._order_number_factory = order_number_factory

    def handle(
        self,
        user_id: str,
        address_id: str,
        item_specs: list[OrderItemSpec],
        payment_method: str,
        notes: str | None = None,
        idempotency_key: str | None = None,
    ) -> OrderDTO:
        """Place an order and return it fully materialized.

        With ``idempotency_key``, repeating the call returns the order
        created by the first call instead of reserving stock again.
        """
        self._validate_cart(item_specs, payment_method)

        attempt = 1
        while True:
            try:
                return self._place(
                    user_id, address_id, item_specs, payment_method,
                    notes, idempotency_key,
                )
            except DuplicateOrderNumberError as exc:
                if attempt >= ORDER_NUMBER_ATTEMPTS:
                    raise
                logger.warning(
                    "Order number collision, regenerating",
                    extra={"order_number": exc.order_number, "attempt": attempt},
                )
                attempt += 1
            except DuplicateRequestError:
                # A concurrent call with the same key committed first.
                with self._uow_factory() as uow:
                    existing = uow.orders.get_by_idempotency_key(user_id, idempotency_key)
                    if existing is None:
                        raise
                    return materialize(uow, existing)

    # --- Steps ----------------------------------------------------------------

    def _place(
        self,
        user_id: str,
        address_id: str,
        item_specs: list[OrderItemSpec],
        payment_method: str,
        notes: str | None,
        idempotency_key: str | None,
    ) -> OrderDTO:
        with self._uow_factory() as uow:
            if idempotency_key:
                existing = uow.orders.get_by_idempotency_key(user_id, idempotency_key)
                if existing is not None:
                    logger.info(
                        "Replaying order for repeated idempotency key",
                        extra={"order_number": existing.order_number, "user_id": user_id},
                    )
                    return materialize(uow, existing)

            if uow.addresses.get_for_user(address_id, user_id) is None:
                raise AddressNotFoundError(address_id)

            now = self._clock()
            order = Order.create(
                order_number=self._order_number_factory(now),
                user_id=user_id,
                address_id=address_id,
                items=self._snapshot_items(uow, item_specs),
                payment_method=payment_method,
                notes=notes,
                idempotency_key=idempotency_key,
                created_at=now,
            )

            uow.orders.add(order)
            InventoryLedger(uow.products).reserve(order.reservation)

            dto = materialize(uow, order)
            uow.commit()

        logger.info(
            "Order created",
            extra={"order_number": order.order_number, "order_id": order.id, "user_id": user_id},
        )
        return dto

    @staticmethod
    def _validate_cart(item_specs: list[OrderItemSpec], payment_method: str) -> None:
        if not item_specs:
            raise ValidationError("Order must contain at least one item")
        for spec in item_specs:
            if not spec.product_id:
                raise ValidationError("Every item needs a product ID")
            Quantity(spec.quantity)
        if not payment_method or not payment_method.strip():
            raise ValidationError("Payment method is required")

    @staticmethod
    def _snapshot_items(uow: UnitOfWork, item_specs: list[OrderItemSpec]) -> list[OrderItem]:
        items: list[OrderItem] = []
        for spec in item_specs:
            product = uow.products.get_by_id(spec.product_id)
            if product is None:
                raise ProductNotFoundError(spec.product_id)
            if not product.is_active:
                raise ProductInactiveError(product.id, product.name)
            if product.stock < spec.quantity:
                raise InsufficientStockError(
                    product.id, product.name, spec.quantity, product.stock,
                )

            items.append(
                OrderItem(
                    product_id=product.id,
                    quantity=Quantity(spec.quantity),
                    unit_price=product.price,  # <-- price snapshot
                    size=spec.size,
                    color=spec.color,
                    product_name=product.name,
                )
            )
        return items
