"""
Module: donation_kernel.models.item
Responsibility: ORM persistence for donated food items and their stock level.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - stock >= 0 (ck_item_stock_non_negative), backing the ledger's own check.
    - (lower(name), category) is unique (uq_item_lower_name_category), so
      "Apples" and "apples" cannot both exist in one category.
    - version is bumped on every UPDATE and compared in the WHERE clause
      (SQLAlchemy version_id_col), so a stale read-modify-write fails with
      StaleDataError instead of silently overwriting stock.

Failure modes:
    - IntegrityError on duplicate (name, category) or negative stock.
    - StaleDataError when another transaction updated the row first.
"""

from enum import Enum

from sqlalchemy import CheckConstraint, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TrackedBase


class ItemCategory(str, Enum):
    """Food category of an item."""

    BEVERAGE = "beverage"
    FRUIT = "fruit"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @classmethod
    def from_name(cls, name: str) -> "ItemCategory":
        """Case-insensitive lookup by value or display label.

        Raises:
            ValueError: If no category matches.
        """
        key = (name or "").strip().lower()
        for category in cls:
            if key in (category.value, CATEGORY_LABELS[category].lower()):
                return category
        raise ValueError(f"Unknown item category: {name!r}")


CATEGORY_LABELS: dict[ItemCategory, str] = {
    ItemCategory.BEVERAGE: "Beverage",
    ItemCategory.FRUIT: "Fruit",
}


class Item(TrackedBase):
    """
    A donated food item and its available stock.

    Contract:
        stock is the authoritative available quantity.  Only the
        DistributionLedger (and the catalog's administrative stock override)
        write it.
    """

    __tablename__ = "items"

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_item_stock_non_negative"),
        Index("idx_item_category", "category"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    category: Mapped[ItemCategory] = mapped_column(
        String(20),
        nullable=False,
    )

    stock: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # Optimistic concurrency token
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Item {self.id} {self.name!r} [{self.category}] stock={self.stock}>"


Index(
    "uq_item_lower_name_category",
    func.lower(Item.name),
    Item.category,
    unique=True,
)
