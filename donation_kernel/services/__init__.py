"""Kernel services: catalog, directory, registry, and the distribution ledger."""

from donation_kernel.services.base import BaseService
from donation_kernel.services.distribution_ledger import (
    DistributionLedger,
    LedgerResult,
    LedgerStatus,
)
from donation_kernel.services.donation_service import DonationService
from donation_kernel.services.item_catalog_service import ItemCatalogService
from donation_kernel.services.recipient_service import RecipientService

__all__ = [
    "BaseService",
    "DistributionLedger",
    "LedgerResult",
    "LedgerStatus",
    "DonationService",
    "ItemCatalogService",
    "RecipientService",
]
