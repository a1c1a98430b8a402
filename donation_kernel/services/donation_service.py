"""
Service layer for the donation registry.

A donation drive is a label attached to distributions; it owns no stock.
"""

from __future__ import annotations

from sqlalchemy import select

from donation_kernel.domain.dtos import DonationInfo
from donation_kernel.exceptions import DonationNotFoundError, InvalidDonationError
from donation_kernel.logging_config import get_logger
from donation_kernel.models.donation import DONATION_TYPE_LABELS, Donation, DonationType
from donation_kernel.services.base import BaseService

logger = get_logger("services.donations")


def resolve_donation_type(value: DonationType | str) -> DonationType:
    """Accept a DonationType, its value, or its display label (any case)."""
    if isinstance(value, DonationType):
        return value
    key = (value or "").strip().lower()
    for donation_type, label in DONATION_TYPE_LABELS.items():
        if key in (donation_type.value, label.lower()):
            return donation_type
    raise InvalidDonationError("donation_type", f"unknown donation type {value!r}")


class DonationService(BaseService[Donation]):
    """Service for managing donation drives.  Returns DonationInfo DTOs."""

    def _get_by_id(self, donation_id: int) -> Donation:
        donation = self.session.get(Donation, donation_id)
        if donation is None:
            raise DonationNotFoundError(donation_id)
        return donation

    def get_donation(self, donation_id: int) -> DonationInfo:
        """
        Get donation by ID.

        Raises:
            DonationNotFoundError: If the donation doesn't exist.
        """
        return DonationInfo.from_model(self._get_by_id(donation_id))

    def exists(self, donation_id: int) -> bool:
        return self.session.get(Donation, donation_id) is not None

    def create_donation(
        self,
        name: str,
        donation_type: DonationType | str,
        location: str | None = None,
    ) -> DonationInfo:
        """
        Create a new donation drive.

        Raises:
            InvalidDonationError: Empty name or unknown donation type.
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise InvalidDonationError("name", "must not be empty")
        resolved = resolve_donation_type(donation_type)

        donation = Donation(
            name=clean_name,
            donation_type=resolved.value,
            location=location,
        )
        self.session.add(donation)
        self.session.flush()

        logger.info(
            "donation_created",
            extra={"donation_id": donation.id, "donation_type": resolved.value},
        )
        return DonationInfo.from_model(donation)

    def list_donations(self) -> list[DonationInfo]:
        """List donation drives ordered by id."""
        stmt = select(Donation).order_by(Donation.id)
        return [DonationInfo.from_model(d) for d in self.session.execute(stmt).scalars()]

    def seed_default_donations(self) -> list[DonationInfo]:
        """
        Create one drive per standard donation type, named by its label,
        unless a drive of that type already exists.

        Returns:
            The drives created by this call (empty when already seeded).
        """
        existing = set(self.session.execute(select(Donation.donation_type)).scalars())
        created = []
        for donation_type in DonationType:
            if donation_type.value not in existing:
                created.append(self.create_donation(donation_type.label, donation_type))
        return created
