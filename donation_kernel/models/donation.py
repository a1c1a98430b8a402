"""
Module: donation_kernel.models.donation
Responsibility: ORM persistence for donation drives.  A donation is a label
    attached to distributions; it owns no stock.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from enum import Enum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TrackedBase


class DonationType(str, Enum):
    """Kind of donation drive."""

    EMERGENCY_FOOD_AID = "emergency_food_aid"
    COMMUNITY_CENTRE_COLLECTION = "community_centre_collection"

    @property
    def label(self) -> str:
        return DONATION_TYPE_LABELS[self]


DONATION_TYPE_LABELS: dict[DonationType, str] = {
    DonationType.EMERGENCY_FOOD_AID: "Emergency Food Aid",
    DonationType.COMMUNITY_CENTRE_COLLECTION: "Community Centre Collection",
}


class Donation(TrackedBase):
    """A named donation drive."""

    __tablename__ = "donations"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    donation_type: Mapped[DonationType] = mapped_column(
        String(40),
        nullable=False,
    )

    location: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Donation {self.id} {self.name!r} ({self.donation_type})>"
