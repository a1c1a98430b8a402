"""
Module: donation_kernel.selectors.distribution_selector
Responsibility: Read views over the distribution ledger -- by recipient, by
    item, and across all drives -- returned as denormalized DistributionView
    rows carrying item, recipient, and donation names.
Architecture position: Kernel > Selectors.

Ordering:
    list_by_recipient  distribution_date DESC, item_id ASC
    list_by_item       distribution_date DESC, recipient_id ASC
    list_all           distribution_date DESC, item_id ASC, recipient_id ASC
"""

from sqlalchemy import Select, func, select

from donation_kernel.domain.dtos import DistributionInfo, DistributionView
from donation_kernel.models.distribution import Distribution
from donation_kernel.models.donation import Donation
from donation_kernel.models.item import Item
from donation_kernel.models.recipient import Recipient
from donation_kernel.selectors.base import BaseSelector


class DistributionSelector(BaseSelector[Distribution]):
    """Read-only queries over distributions."""

    def _view_query(self) -> Select:
        return (
            select(
                Distribution.item_id,
                Item.name,
                Distribution.recipient_id,
                Recipient.name,
                Distribution.donation_id,
                Donation.name,
                Distribution.quantity,
                Distribution.distribution_date,
            )
            .join(Item, Item.id == Distribution.item_id)
            .join(Recipient, Recipient.id == Distribution.recipient_id)
            .join(Donation, Donation.id == Distribution.donation_id)
        )

    def _views(self, stmt: Select) -> list[DistributionView]:
        return [
            DistributionView(
                item_id=row[0],
                item_name=row[1],
                recipient_id=row[2],
                recipient_name=row[3],
                donation_id=row[4],
                donation_name=row[5],
                quantity=row[6],
                distribution_date=row[7],
            )
            for row in self.session.execute(stmt)
        ]

    def list_by_recipient(self, recipient_id: int) -> list[DistributionView]:
        """Everything a recipient currently holds, newest first."""
        stmt = (
            self._view_query()
            .where(Distribution.recipient_id == recipient_id)
            .order_by(Distribution.distribution_date.desc(), Distribution.item_id)
        )
        return self._views(stmt)

    def list_by_item(
        self,
        item_id: int,
        donation_id: int | None = None,
    ) -> list[DistributionView]:
        """Who holds an item, optionally within one donation drive."""
        stmt = self._view_query().where(Distribution.item_id == item_id)
        if donation_id is not None:
            stmt = stmt.where(Distribution.donation_id == donation_id)
        stmt = stmt.order_by(
            Distribution.distribution_date.desc(),
            Distribution.recipient_id,
        )
        return self._views(stmt)

    def list_all(self, donation_id: int | None = None) -> list[DistributionView]:
        """All distributions, optionally within one donation drive."""
        stmt = self._view_query()
        if donation_id is not None:
            stmt = stmt.where(Distribution.donation_id == donation_id)
        stmt = stmt.order_by(
            Distribution.distribution_date.desc(),
            Distribution.item_id,
            Distribution.recipient_id,
        )
        return self._views(stmt)

    def get_active(self, item_id: int, recipient_id: int) -> DistributionInfo | None:
        """The active record for a pair, or None."""
        stmt = select(Distribution).where(
            Distribution.item_id == item_id,
            Distribution.recipient_id == recipient_id,
        )
        record = self.session.execute(stmt).scalar_one_or_none()
        return DistributionInfo.from_model(record) if record else None

    def distributed_quantity(self, item_id: int) -> int:
        """Total quantity of an item currently held by recipients."""
        stmt = select(func.coalesce(func.sum(Distribution.quantity), 0)).where(
            Distribution.item_id == item_id
        )
        return int(self.session.execute(stmt).scalar_one())
