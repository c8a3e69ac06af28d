"""Application service: Show Order use case (query)."""

from __future__ import annotations

from storefront.application.dto import OrderDTO
from storefront.domain.exceptions import OrderNotFoundError
from storefront.domain.model.order import Order
from storefront.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory


class ShowOrderHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: str, user_id: str | None = None) -> OrderDTO:
        """Return one order.

        With ``user_id`` the order must belong to that user; without it
        (admin view) any order is visible.  Orders owned by someone else
        are reported as not found.
        """
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id, user_id=user_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            return materialize(uow, order)


def materialize(uow: UnitOfWork, order: Order) -> OrderDTO:
    """Attach the shipping address and owner summary to an order."""
    return OrderDTO.from_order(
        order,
        address=uow.addresses.get_for_user(order.address_id, order.user_id),
        user=uow.users.get_summary(order.user_id),
    )


def materialize_page(uow: UnitOfWork, orders: list[Order]) -> list[OrderDTO]:
    """Like materialize, with one address lookup and one user lookup per page."""
    addresses = uow.addresses.get_many({o.address_id for o in orders})
    users = uow.users.get_summaries({o.user_id for o in orders})
    dtos = []
    for order in orders:
        address = addresses.get(order.address_id)
        if address is not None and address.user_id != order.user_id:
            address = None
        dtos.append(OrderDTO.from_order(order, address=address, user=users.get(order.user_id)))
    return dtos
