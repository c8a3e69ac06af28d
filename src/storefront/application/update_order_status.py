"""Application service: Update Order Status use case (admin).

The caller has already been verified as an administrator.  Moving an
order to CANCELLED returns its stock in the same unit of work, just like
a customer cancellation.
"""

from __future__ import annotations

import logging

from storefront.application.dto import OrderDTO
from storefront.application.show_order import materialize
from storefront.domain.exceptions import InvalidStatusTransitionError, OrderNotFoundError
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.repository.unit_of_work import UnitOfWorkFactory
from storefront.domain.service.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class UpdateOrderStatusHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: str, new_status: OrderStatus) -> OrderDTO:
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)

            previous = order.status
            if order.set_status(new_status):
                if not uow.orders.update_status(order.id, new_status, expected=previous):
                    raise InvalidStatusTransitionError(
                        f"Order {order.order_number} changed concurrently; reload and retry"
                    )
                if new_status is OrderStatus.CANCELLED:
                    InventoryLedger(uow.products).release(order.reservation)

            dto = materialize(uow, order)
            uow.commit()

        if previous is not new_status:
            logger.info(
                f"Order status {previous.value} -> {new_status.value}",
                extra={"order_number": order.order_number, "order_id": order.id},
            )
        return dto
