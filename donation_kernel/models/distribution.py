"""
Module: donation_kernel.models.distribution
Responsibility: ORM persistence for the ledger's core entity -- a grant of a
    quantity of one item to one recipient under one donation drive.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - At most one active row per (item_id, recipient_id)
      (uq_distribution_item_recipient).  A repeat assignment must reverse
      the existing row first.
    - quantity > 0 (ck_distribution_quantity_positive).
    - Foreign keys use ON DELETE RESTRICT: an item, recipient, or donation
      referenced by a distribution cannot be hard-deleted.

Failure modes:
    - IntegrityError when two transactions race to insert the same pair.
"""

from datetime import date

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TrackedBase


class Distribution(TrackedBase):
    """An active assignment of item stock to a recipient."""

    __tablename__ = "distributions"

    __table_args__ = (
        UniqueConstraint("item_id", "recipient_id", name="uq_distribution_item_recipient"),
        CheckConstraint("quantity > 0", name="ck_distribution_quantity_positive"),
        Index("idx_distribution_recipient", "recipient_id"),
        Index("idx_distribution_donation", "donation_id"),
        Index("idx_distribution_date", "distribution_date"),
    )

    item_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("items.id", ondelete="RESTRICT"),
        nullable=False,
    )

    recipient_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("recipients.id", ondelete="RESTRICT"),
        nullable=False,
    )

    donation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("donations.id", ondelete="RESTRICT"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    distribution_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<Distribution item={self.item_id} recipient={self.recipient_id} "
            f"donation={self.donation_id} qty={self.quantity}>"
        )
