"""
Typed Exception Hierarchy for the Donation Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (CLI, API layers, tests) must be able to react to a refused
allocation without parsing message strings.  Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE attribute (machine-readable, stable, matches ``ErrorKind``)
  3. Structured DATA (offending ids, requested quantity, limits)
  4. A RETRYABLE flag (the same request may succeed if simply repeated)

Example:
    try:
        catalog.delete_item(item_id)
    except ItemInUseError as e:
        render(f"Item {e.item_id} has {e.distribution_count} distributions")

Services raise these exceptions.  The DistributionLedger converts them into
``LedgerResult`` values at its public boundary, so ledger callers receive a
typed result rather than an exception.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    DonationKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidQuantityError
    |   +-- InvalidItemError
    |   +-- InvalidRecipientError
    |   +-- InvalidDonationError
    |
    +-- NotFoundError
    |   +-- ItemNotFoundError
    |   +-- RecipientNotFoundError
    |   +-- DonationNotFoundError
    |   +-- AssignmentNotFoundError
    |
    +-- AllocationError
    |   +-- PolicyCapExceededError
    |   +-- InsufficientStockError
    |   +-- AssignmentExistsError
    |   +-- PolicyNotConfiguredError
    |
    +-- CatalogError
    |   +-- DuplicateItemError
    |   +-- ItemInUseError
    |
    +-- ConcurrencyError
    |   +-- ConcurrentModificationError      (retryable)
    |
    +-- StoreError
        +-- StoreUnavailableError            (retryable)

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                      | When Raised
--------------------------|----------------------------------------------------
INVALID_QUANTITY          | Requested quantity is not a positive integer
INVALID_ITEM              | Empty name, unknown category, negative stock
INVALID_RECIPIENT         | Empty recipient name / unknown recipient class
INVALID_DONATION          | Empty donation name / unknown donation type
ITEM_NOT_FOUND            | Item id doesn't exist
RECIPIENT_NOT_FOUND       | Recipient id doesn't exist
DONATION_NOT_FOUND        | Donation id doesn't exist
ASSIGNMENT_NOT_FOUND      | No active distribution for (item, recipient)
POLICY_CAP_EXCEEDED       | Quantity above the recipient class cap
INSUFFICIENT_STOCK        | Quantity above the item's current stock
ASSIGNMENT_EXISTS         | (item, recipient) already has an active record
POLICY_NOT_CONFIGURED     | No policy registered for the recipient class
DUPLICATE_ITEM            | Same name already used within the category
ITEM_IN_USE               | Deleting an item that has distributions
CONCURRENT_MODIFICATION   | Another transaction changed the row first
STORE_UNAVAILABLE         | Persistence collaborator unreachable
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable error kinds surfaced in ``LedgerResult``."""

    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_ITEM = "INVALID_ITEM"
    INVALID_RECIPIENT = "INVALID_RECIPIENT"
    INVALID_DONATION = "INVALID_DONATION"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    RECIPIENT_NOT_FOUND = "RECIPIENT_NOT_FOUND"
    DONATION_NOT_FOUND = "DONATION_NOT_FOUND"
    ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"
    POLICY_CAP_EXCEEDED = "POLICY_CAP_EXCEEDED"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    ASSIGNMENT_EXISTS = "ASSIGNMENT_EXISTS"
    POLICY_NOT_CONFIGURED = "POLICY_NOT_CONFIGURED"
    DUPLICATE_ITEM = "DUPLICATE_ITEM"
    ITEM_IN_USE = "ITEM_IN_USE"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class DonationKernelError(Exception):
    """
    Base exception for all donation kernel errors.

    All subclasses must have a ``code`` class attribute matching an
    ``ErrorKind`` value.
    """

    code: str = "DONATION_KERNEL_ERROR"
    retryable: bool = False

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind(self.code)


# Validation exceptions


class ValidationError(DonationKernelError):
    """Base exception for input validation errors."""

    code: str = "VALIDATION_ERROR"


class InvalidQuantityError(ValidationError):
    """Requested quantity is not a positive integer."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: object):
        self.quantity = quantity
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")


class InvalidItemError(ValidationError):
    """Item attributes are invalid."""

    code: str = "INVALID_ITEM"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid item {field}: {reason}")


class InvalidRecipientError(ValidationError):
    """Recipient attributes are invalid."""

    code: str = "INVALID_RECIPIENT"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid recipient {field}: {reason}")


class InvalidDonationError(ValidationError):
    """Donation attributes are invalid."""

    code: str = "INVALID_DONATION"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid donation {field}: {reason}")


# Lookup exceptions


class NotFoundError(DonationKernelError):
    """Base exception for missing entities."""

    code: str = "NOT_FOUND"


class ItemNotFoundError(NotFoundError):
    """Item with given ID was not found."""

    code: str = "ITEM_NOT_FOUND"

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class RecipientNotFoundError(NotFoundError):
    """Recipient with given ID was not found."""

    code: str = "RECIPIENT_NOT_FOUND"

    def __init__(self, recipient_id: int):
        self.recipient_id = recipient_id
        super().__init__(f"Recipient not found: {recipient_id}")


class DonationNotFoundError(NotFoundError):
    """Donation with given ID was not found."""

    code: str = "DONATION_NOT_FOUND"

    def __init__(self, donation_id: int):
        self.donation_id = donation_id
        super().__init__(f"Donation not found: {donation_id}")


class AssignmentNotFoundError(NotFoundError):
    """No active distribution exists for the (item, recipient) pair."""

    code: str = "ASSIGNMENT_NOT_FOUND"

    def __init__(self, item_id: int, recipient_id: int):
        self.item_id = item_id
        self.recipient_id = recipient_id
        super().__init__(
            f"Recipient {recipient_id} has not been assigned item {item_id}"
        )


# Allocation exceptions


class AllocationError(DonationKernelError):
    """Base exception for refused allocations."""

    code: str = "ALLOCATION_ERROR"


class PolicyCapExceededError(AllocationError):
    """Requested quantity exceeds the allocation policy cap."""

    code: str = "POLICY_CAP_EXCEEDED"

    def __init__(self, item_id: int, recipient_id: int, requested: int, cap: int, policy: str):
        self.item_id = item_id
        self.recipient_id = recipient_id
        self.requested = requested
        self.cap = cap
        self.policy = policy
        super().__init__(
            f"Requested quantity ({requested}) exceeds {policy} cap ({cap}) "
            f"for recipient {recipient_id}"
        )


class InsufficientStockError(AllocationError):
    """Requested quantity exceeds the item's available stock."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: int, requested: int, available: int):
        self.item_id = item_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for item {item_id}: "
            f"requested {requested}, available {available}"
        )


class AssignmentExistsError(AllocationError):
    """The (item, recipient) pair already holds an active distribution."""

    code: str = "ASSIGNMENT_EXISTS"

    def __init__(self, item_id: int, recipient_id: int, quantity: int):
        self.item_id = item_id
        self.recipient_id = recipient_id
        self.quantity = quantity
        super().__init__(
            f"Recipient {recipient_id} already holds {quantity} of item {item_id}; "
            "reverse the assignment first"
        )


class PolicyNotConfiguredError(AllocationError):
    """No allocation policy is registered for the recipient class."""

    code: str = "POLICY_NOT_CONFIGURED"

    def __init__(self, recipient_class: str):
        self.recipient_class = recipient_class
        super().__init__(f"No allocation policy registered for '{recipient_class}'")


# Catalog exceptions


class CatalogError(DonationKernelError):
    """Base exception for item catalog errors."""

    code: str = "CATALOG_ERROR"


class DuplicateItemError(CatalogError):
    """An item with this name already exists in the category."""

    code: str = "DUPLICATE_ITEM"

    def __init__(self, name: str, category: str):
        self.name = name
        self.category = category
        super().__init__(
            f"An item named '{name}' already exists in category {category}"
        )


class ItemInUseError(CatalogError):
    """Item is referenced by distributions and cannot be deleted."""

    code: str = "ITEM_IN_USE"

    def __init__(self, item_id: int, distribution_count: int):
        self.item_id = item_id
        self.distribution_count = distribution_count
        super().__init__(
            f"Item {item_id} has {distribution_count} distribution(s); "
            "cannot delete. Set stock to 0 instead."
        )


# Concurrency exceptions


class ConcurrencyError(DonationKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"
    retryable: bool = True


class ConcurrentModificationError(ConcurrencyError):
    """Another transaction modified the row between read and write."""

    code: str = "CONCURRENT_MODIFICATION"

    def __init__(self, entity_type: str, entity_id: object, detail: str | None = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.detail = detail
        super().__init__(
            f"Concurrent modification on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )


# Store exceptions


class StoreError(DonationKernelError):
    """Base exception for persistence collaborator failures."""

    code: str = "STORE_ERROR"
    retryable: bool = True


class StoreUnavailableError(StoreError):
    """The underlying store could not be reached."""

    code: str = "STORE_UNAVAILABLE"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Store unavailable: {detail}")
