"""Application service: List Orders use case (query)."""

from __future__ import annotations

import math

from storefront.application.dto import OrderPageDTO
from storefront.application.show_order import materialize_page
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.repository.unit_of_work import UnitOfWorkFactory

MAX_PAGE_SIZE = 100


class ListOrdersHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, user_id: str, page: int = 1, limit: int = 10) -> OrderPageDTO:
        """One page of the user's own orders, newest first."""
        return self._page(user_id, None, page, limit)

    def handle_admin(
        self,
        status: OrderStatus | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPageDTO:
        """One page of every user's orders, optionally filtered by status."""
        return self._page(None, status, page, limit)

    def _page(
        self,
        user_id: str | None,
        status: OrderStatus | None,
        page: int,
        limit: int,
    ) -> OrderPageDTO:
        if page < 1:
            raise ValidationError("Page must be 1 or greater")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

        with self._uow_factory() as uow:
            orders = uow.orders.list_page(
                user_id, status, offset=(page - 1) * limit, limit=limit,
            )
            total = uow.orders.count(user_id, status)
            return OrderPageDTO(
                orders=materialize_page(uow, orders),
                total=total,
                pages=math.ceil(total / limit),
                current_page=page,
                limit=limit,
            )
