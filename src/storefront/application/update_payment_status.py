"""Application service: Update Payment Status use case (admin)."""

from __future__ import annotations

import logging

from storefront.application.dto import OrderDTO
from storefront.application.show_order import materialize
from storefront.domain.exceptions import InvalidStatusTransitionError, OrderNotFoundError
from storefront.domain.model.order_status import PaymentStatus
from storefront.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class UpdatePaymentStatusHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: str, new_status: PaymentStatus) -> OrderDTO:
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)

            previous = order.payment_status
            if order.set_payment_status(new_status):
                if not uow.orders.update_payment_status(order.id, new_status, expected=previous):
                    raise InvalidStatusTransitionError(
                        f"Order {order.order_number} changed concurrently; reload and retry"
                    )
                logger.info(
                    f"Payment status {previous.value} -> {new_status.value}",
                    extra={"order_number": order.order_number, "order_id": order.id},
                )

            dto = materialize(uow, order)
            uow.commit()
        return dto
