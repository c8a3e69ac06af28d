"""Exceptions raised by the order core.

Business rule violations subclass DomainException: their message is
specific and safe to show to the caller.  Data-store failures subclass
InfrastructureError: their message goes to the logs, and callers show
``user_message`` instead.

Every class carries a stable ``code`` so outer layers can map errors
without matching on message text.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    code = "DOMAIN_ERROR"


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    code = "VALIDATION_ERROR"


class InvalidStatusTransitionError(ValidationError):
    """The requested order or payment status change is not allowed."""

    code = "INVALID_STATUS_TRANSITION"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "NOT_FOUND"


class AddressNotFoundError(EntityNotFoundError):

    code = "ADDRESS_NOT_FOUND"

    def __init__(self, address_id: str) -> None:
        super().__init__(f"Address '{address_id}' not found")
        self.address_id = address_id


class OrderNotFoundError(EntityNotFoundError):

    code = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order '{order_id}' not found")
        self.order_id = order_id


class ProductUnavailableError(DomainException):
    """The product cannot be ordered: missing from the catalog or inactive."""

    code = "PRODUCT_UNAVAILABLE"

    def __init__(self, product_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Product '{product_id}' is unavailable")
        self.product_id = product_id


class ProductNotFoundError(ProductUnavailableError):

    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str) -> None:
        super().__init__(product_id, f"Product '{product_id}' not found")


class ProductInactiveError(ProductUnavailableError):

    code = "PRODUCT_INACTIVE"

    def __init__(self, product_id: str, product_name: str | None = None) -> None:
        super().__init__(
            product_id,
            f"Product '{product_name or product_id}' is no longer available",
        )


class InsufficientStockError(DomainException):

    code = "INSUFFICIENT_STOCK"

    def __init__(
        self, product_id: str, product_name: str, requested: int, available: int,
    ) -> None:
        super().__init__(
            f"Insufficient stock for {product_name} "
            f"(requested {requested}, {available} available)"
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


class OrderNotCancellableError(DomainException):
    """Covers both a missing order and one that is no longer PENDING."""

    code = "ORDER_NOT_CANCELLABLE"

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order '{order_id}' not found or cannot be cancelled")
        self.order_id = order_id


# ---------------------------------------------------------------------------
# Infrastructure errors
# ---------------------------------------------------------------------------


class InfrastructureError(Exception):
    """Base class for data-store failures."""

    code = "INTERNAL_ERROR"
    user_message = "Something went wrong. Please try again later."


class DatabaseConnectionError(InfrastructureError):
    """The data store is unreachable (retries exhausted or connection lost)."""

    code = "DB_UNAVAILABLE"
    user_message = "Database temporarily unavailable. Please try again."


class StorageError(InfrastructureError):
    """Any other persistence failure. The transaction has been rolled back."""

    code = "STORAGE_ERROR"


class DuplicateOrderNumberError(StorageError):
    """The generated order number collided with an existing one."""

    code = "DUPLICATE_ORDER_NUMBER"

    def __init__(self, order_number: str) -> None:
        super().__init__(f"Order number {order_number} already exists")
        self.order_number = order_number


class DuplicateRequestError(StorageError):
    """Another order was committed concurrently with the same idempotency key."""

    code = "DUPLICATE_REQUEST"

    def __init__(self, user_id: str, idempotency_key: str) -> None:
        super().__init__(
            f"Idempotency key {idempotency_key!r} already used by user {user_id}"
        )
        self.user_id = user_id
        self.idempotency_key = idempotency_key
