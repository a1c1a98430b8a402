"""
Module: donation_kernel.models.recipient
Responsibility: ORM persistence for people and organisations that receive
    distributed items.  Read-mostly; the ledger only checks existence and
    reads recipient_class to pick an allocation policy.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from enum import Enum

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TrackedBase


class RecipientClass(str, Enum):
    """Recipient classification used to select an allocation policy."""

    INDIVIDUAL = "individual"
    ORGANISATION = "organisation"


class Recipient(TrackedBase):
    """A recipient of distributed items."""

    __tablename__ = "recipients"

    __table_args__ = (
        Index("idx_recipient_name", "name"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    address: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    gender: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    phone: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )

    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    emergency_contact: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    recipient_class: Mapped[RecipientClass] = mapped_column(
        String(20),
        nullable=False,
        default=RecipientClass.INDIVIDUAL,
    )

    def __repr__(self) -> str:
        return f"<Recipient {self.id} {self.name!r} ({self.recipient_class})>"
