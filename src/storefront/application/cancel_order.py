"""Application service: Cancel Order use case.

A customer may cancel their own order while it is PENDING.  The status
change and the stock release happen in one unit of work, so a cancelled
order always has its stock back and a live order never does.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import OrderNotCancellableError
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.repository.unit_of_work import UnitOfWorkFactory
from storefront.domain.service.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: str, user_id: str) -> None:
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id, user_id=user_id)
            if order is None or not order.can_be_cancelled_by(user_id):
                raise OrderNotCancellableError(order_id)

            # Conditional on PENDING: of two concurrent cancellations only
            # one matches the row, so stock is released once.
            if not uow.orders.update_status(
                order.id, OrderStatus.CANCELLED, expected=OrderStatus.PENDING,
            ):
                raise OrderNotCancellableError(order_id)

            InventoryLedger(uow.products).release(order.reservation)
            uow.commit()

        logger.info(
            "Order cancelled",
            extra={"order_number": order.order_number, "order_id": order.id, "user_id": user_id},
        )
