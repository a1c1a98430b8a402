"""Domain models for the donation kernel."""

from donation_kernel.models.distribution import Distribution
from donation_kernel.models.donation import DONATION_TYPE_LABELS, Donation, DonationType
from donation_kernel.models.item import CATEGORY_LABELS, Item, ItemCategory
from donation_kernel.models.recipient import Recipient, RecipientClass

__all__ = [
    "Item",
    "ItemCategory",
    "CATEGORY_LABELS",
    "Recipient",
    "RecipientClass",
    "Donation",
    "DonationType",
    "DONATION_TYPE_LABELS",
    "Distribution",
]
