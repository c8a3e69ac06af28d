"""Abstract read access to the address book and user directory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from storefront.domain.model.customer import Address, UserSummary


class AddressRepository(ABC):

    @abstractmethod
    def get_for_user(self, address_id: str, user_id: str) -> Address | None:
        """Return the address only if it belongs to ``user_id``."""

    @abstractmethod
    def get_many(self, address_ids: Iterable[str]) -> dict[str, Address]:
        """Fetch several addresses at once, keyed by id; unknown ids are omitted.

        No ownership filter: callers match ``user_id`` themselves.
        """


class UserRepository(ABC):

    @abstractmethod
    def get_summary(self, user_id: str) -> UserSummary | None:
        """Return name and email for the user, or None."""

    @abstractmethod
    def get_summaries(self, user_ids: Iterable[str]) -> dict[str, UserSummary]:
        """Fetch several user summaries at once, keyed by id."""
