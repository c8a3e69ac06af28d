"""SQLAlchemy implementations of AddressRepository and UserRepository."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.domain.model.customer import Address, UserSummary
from storefront.domain.repository.customer_repository import (
    AddressRepository,
    UserRepository,
)
from storefront.infrastructure.database.schema import AddressRow, UserRow


class SqlAddressRepository(AddressRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_for_user(self, address_id: str, user_id: str) -> Address | None:
        row = self._session.execute(
            select(AddressRow).where(
                AddressRow.id == address_id,
                AddressRow.user_id == user_id,
            )
        ).scalar_one_or_none()
        if row is None:
            return None
        return self._to_domain(row)

    def get_many(self, address_ids: Iterable[str]) -> dict[str, Address]:
        ids = set(address_ids)
        if not ids:
            return {}
        rows = self._session.execute(
            select(AddressRow).where(AddressRow.id.in_(ids))
        ).scalars()
        return {row.id: self._to_domain(row) for row in rows}

    @staticmethod
    def _to_domain(row: AddressRow) -> Address:
        return Address(
            id=row.id,
            user_id=row.user_id,
            full_name=row.full_name,
            street=row.street,
            city=row.city,
            state=row.state,
            postal_code=row.postal_code,
            country=row.country,
            phone=row.phone,
        )


class SqlUserRepository(UserRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_summary(self, user_id: str) -> UserSummary | None:
        row = self._session.get(UserRow, user_id)
        if row is None:
            return None
        return self._to_summary(row)

    def get_summaries(self, user_ids: Iterable[str]) -> dict[str, UserSummary]:
        ids = set(user_ids)
        if not ids:
            return {}
        rows = self._session.execute(
            select(UserRow).where(UserRow.id.in_(ids))
        ).scalars()
        return {row.id: self._to_summary(row) for row in rows}

    @staticmethod
    def _to_summary(row: UserRow) -> UserSummary:
        return UserSummary(
            id=row.id,
            first_name=row.first_name,
            last_name=row.last_name,
            email=row.email,
        )
