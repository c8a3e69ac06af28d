"""Sample catalog and accounts for development.

Seeding is idempotent: users are matched by email, products by SKU and
the customer's address by (user, street), so running it twice changes
nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.infrastructure.database.schema import AddressRow, ProductRow, UserRow

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS = [
    {
        "name": "Premium Cotton Shirt Fabric - White",
        "sku": "SHIRT-COT-WHT-001",
        "price": Decimal("1200.00"),
        "stock": 50,
    },
    {
        "name": "Wool Blend Pant Fabric - Charcoal",
        "sku": "PANT-WOOL-CHAR-001",
        "price": Decimal("2500.00"),
        "stock": 30,
    },
    {
        "name": "Luxury Suit Fabric - Navy Blue",
        "sku": "SUIT-WOOL-NAVY-001",
        "price": Decimal("8500.00"),
        "stock": 15,
    },
]

SAMPLE_USERS = [
    {"email": "admin@uptodateselection.com", "first_name": "Admin", "last_name": "User"},
    {
        "email": "customer@example.com",
        "first_name": "John",
        "last_name": "Doe",
        "phone": "+91 9876543210",
    },
]

SAMPLE_ADDRESS = {
    "full_name": "John Doe",
    "street": "221 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "postal_code": "560001",
    "country": "India",
    "phone": "+91 9876543210",
    "is_default": True,
}


@dataclass
class SeedResult:
    """IDs of the seeded rows, for printing and for tests."""

    customer_id: str
    address_id: str
    admin_id: str
    product_ids: dict[str, str] = field(default_factory=dict)  # sku -> id


def seed(session: Session) -> SeedResult:
    """Insert the sample rows that are missing; the caller commits."""
    users = {data["email"]: _upsert_user(session, data) for data in SAMPLE_USERS}
    customer = users["customer@example.com"]

    address = session.execute(
        select(AddressRow).where(
            AddressRow.user_id == customer.id,
            AddressRow.street == SAMPLE_ADDRESS["street"],
        )
    ).scalar_one_or_none()
    if address is None:
        address = AddressRow(user_id=customer.id, **SAMPLE_ADDRESS)
        session.add(address)

    products = {data["sku"]: _upsert_product(session, data) for data in SAMPLE_PRODUCTS}

    session.flush()
    logger.info(f"Seeded {len(users)} users and {len(products)} products")

    return SeedResult(
        customer_id=customer.id,
        address_id=address.id,
        admin_id=users["admin@uptodateselection.com"].id,
        product_ids={sku: row.id for sku, row in products.items()},
    )


def _upsert_user(session: Session, data: dict) -> UserRow:
    row = session.execute(
        select(UserRow).where(UserRow.email == data["email"])
    ).scalar_one_or_none()
    if row is None:
        row = UserRow(**data)
        session.add(row)
        session.flush()
    return row


def _upsert_product(session: Session, data: dict) -> ProductRow:
    row = session.execute(
        select(ProductRow).where(ProductRow.sku == data["sku"])
    ).scalar_one_or_none()
    if row is None:
        row = ProductRow(**data)
        session.add(row)
    return row
