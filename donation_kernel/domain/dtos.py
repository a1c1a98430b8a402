"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable snapshots handed across service and selector boundaries so
    callers never hold live ORM instances bound to a closed session.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  ``from_model()`` class methods are
    boundary converters invoked only from services and selectors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from donation_kernel.models.donation import DonationType
from donation_kernel.models.item import ItemCategory
from donation_kernel.models.recipient import RecipientClass

if TYPE_CHECKING:
    from donation_kernel.models.distribution import Distribution as DistributionModel
    from donation_kernel.models.donation import Donation as DonationModel
    from donation_kernel.models.item import Item as ItemModel
    from donation_kernel.models.recipient import Recipient as RecipientModel


@dataclass(frozen=True)
class ItemInfo:
    """Snapshot of an item and its stock at read time."""

    id: int
    name: str
    category: ItemCategory
    stock: int

    @property
    def category_label(self) -> str:
        return self.category.label

    @classmethod
    def from_model(cls, model: ItemModel) -> ItemInfo:
        return cls(
            id=model.id,
            name=model.name,
            category=ItemCategory(model.category),
            stock=model.stock,
        )


@dataclass(frozen=True)
class RecipientInfo:
    """Recipient identity and contact details."""

    id: int
    name: str
    recipient_class: RecipientClass
    address: str | None = None
    gender: str | None = None
    phone: str | None = None
    email: str | None = None
    emergency_contact: str | None = None

    @classmethod
    def from_model(cls, model: RecipientModel) -> RecipientInfo:
        return cls(
            id=model.id,
            name=model.name,
            recipient_class=RecipientClass(model.recipient_class),
            address=model.address,
            gender=model.gender,
            phone=model.phone,
            email=model.email,
            emergency_contact=model.emergency_contact,
        )


@dataclass(frozen=True)
class DonationInfo:
    """A donation drive."""

    id: int
    name: str
    donation_type: DonationType
    location: str | None = None

    @property
    def type_label(self) -> str:
        return self.donation_type.label

    @classmethod
    def from_model(cls, model: DonationModel) -> DonationInfo:
        return cls(
            id=model.id,
            name=model.name,
            donation_type=DonationType(model.donation_type),
            location=model.location,
        )


@dataclass(frozen=True)
class DistributionInfo:
    """
    An active distribution record as written by the ledger.

    Guarantees:
        - quantity > 0
        - (item_id, recipient_id) identifies the record
    """

    id: int
    item_id: int
    recipient_id: int
    donation_id: int
    quantity: int
    distribution_date: date

    @classmethod
    def from_model(cls, model: DistributionModel) -> DistributionInfo:
        return cls(
            id=model.id,
            item_id=model.item_id,
            recipient_id=model.recipient_id,
            donation_id=model.donation_id,
            quantity=model.quantity,
            distribution_date=model.distribution_date,
        )


@dataclass(frozen=True)
class DistributionView:
    """Denormalized distribution row for reporting."""

    item_id: int
    item_name: str
    recipient_id: int
    recipient_name: str
    donation_id: int
    donation_name: str
    quantity: int
    distribution_date: date
