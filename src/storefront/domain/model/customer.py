"""Read-only views of the address book and the user directory."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Address:

    id: str
    user_id: str
    full_name: str
    street: str
    city: str
    state: str
    postal_code: str
    country: str = "India"
    phone: str | None = None

    def one_line(self) -> str:
        return f"{self.street}, {self.city}, {self.state} {self.postal_code}, {self.country}"


@dataclass(frozen=True)
class UserSummary:

    id: str
    first_name: str
    last_name: str
    email: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
