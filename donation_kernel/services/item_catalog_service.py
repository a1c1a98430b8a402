"""
Service layer for the item catalog.

Creates, looks up, lists, and retires donated items.  Stock is otherwise
written only by the DistributionLedger; ``update_stock`` here is the
explicit administrative override (stock take, soft-retire to zero) and
bypasses allocation policy.
"""

from __future__ import annotations

from sqlalchemy import String, cast, func, or_, select

from donation_kernel.domain.dtos import ItemInfo
from donation_kernel.exceptions import (
    DuplicateItemError,
    InvalidItemError,
    ItemInUseError,
    ItemNotFoundError,
)
from donation_kernel.logging_config import get_logger
from donation_kernel.models.distribution import Distribution
from donation_kernel.models.item import Item, ItemCategory
from donation_kernel.services.base import BaseService

logger = get_logger("services.item_catalog")


def resolve_category(category: ItemCategory | str) -> ItemCategory:
    """Accept an ItemCategory or a case-insensitive category name."""
    if isinstance(category, ItemCategory):
        return category
    try:
        return ItemCategory.from_name(category)
    except ValueError:
        raise InvalidItemError("category", f"unknown category {category!r}") from None


def _check_stock_value(stock: object) -> int:
    if isinstance(stock, bool) or not isinstance(stock, int):
        raise InvalidItemError("stock", f"must be an integer, got {stock!r}")
    if stock < 0:
        raise InvalidItemError("stock", f"must be >= 0, got {stock}")
    return stock


class ItemCatalogService(BaseService[Item]):
    """
    Service for managing catalog items.

    All public methods return ItemInfo DTOs, not ORM Item entities.
    """

    def _get_by_id(self, item_id: int, for_update: bool = False) -> Item:
        """Get item by ID, raising if not found."""
        if for_update:
            stmt = select(Item).where(Item.id == item_id).with_for_update()
            item = self.session.execute(stmt).scalar_one_or_none()
        else:
            item = self.session.get(Item, item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def _distribution_count(self, item_id: int) -> int:
        stmt = select(func.count(Distribution.id)).where(Distribution.item_id == item_id)
        return self.session.execute(stmt).scalar_one()

    def get_item(self, item_id: int) -> ItemInfo:
        """
        Get item by ID.

        Raises:
            ItemNotFoundError: If the item doesn't exist.
        """
        return ItemInfo.from_model(self._get_by_id(item_id))

    def find_item(self, name: str, category: ItemCategory | str) -> ItemInfo | None:
        """Find an item by name within a category, ignoring case, or None."""
        resolved = resolve_category(category)
        stmt = select(Item).where(
            func.lower(Item.name) == name.strip().lower(),
            Item.category == resolved.value,
        )
        item = self.session.execute(stmt).scalar_one_or_none()
        return ItemInfo.from_model(item) if item else None

    def create_item(
        self,
        name: str,
        category: ItemCategory | str,
        stock: int = 0,
    ) -> ItemInfo:
        """
        Create a new item.

        Args:
            name: Display name, non-empty.
            category: ItemCategory or a case-insensitive category name.
            stock: Initial stock, >= 0.

        Returns:
            Created ItemInfo DTO.

        Raises:
            InvalidItemError: Empty name, unknown category, or bad stock.
            DuplicateItemError: An item with this name already exists in
                the category.
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise InvalidItemError("name", "must not be empty")
        resolved = resolve_category(category)
        initial_stock = _check_stock_value(stock)

        if self.find_item(clean_name, resolved) is not None:
            raise DuplicateItemError(clean_name, resolved.value)

        item = Item(
            name=clean_name,
            category=resolved.value,
            stock=initial_stock,
        )
        self.session.add(item)
        self.session.flush()

        logger.info(
            "item_created",
            extra={
                "item_id": item.id,
                "item_name": clean_name,
                "category": resolved.value,
                "stock": initial_stock,
            },
        )
        return ItemInfo.from_model(item)

    def update_stock(self, item_id: int, stock: int) -> ItemInfo:
        """
        Set an item's stock directly (administrative override).

        Bypasses allocation policy.  Setting stock to 0 is the way to retire
        an item that still has distribution history.

        Raises:
            ItemNotFoundError: If the item doesn't exist.
            InvalidItemError: If stock is not an int >= 0.
        """
        new_stock = _check_stock_value(stock)
        item = self._get_by_id(item_id, for_update=True)
        previous = item.stock
        item.stock = new_stock
        self.session.flush()

        logger.info(
            "item_stock_overridden",
            extra={
                "item_id": item_id,
                "previous_stock": previous,
                "new_stock": new_stock,
            },
        )
        return ItemInfo.from_model(item)

    def delete_item(self, item_id: int) -> None:
        """
        Hard-delete an item that has never been distributed.

        Raises:
            ItemNotFoundError: If the item doesn't exist.
            ItemInUseError: If any distribution references the item.
        """
        item = self._get_by_id(item_id, for_update=True)
        count = self._distribution_count(item_id)
        if count > 0:
            logger.warning(
                "item_delete_blocked",
                extra={"item_id": item_id, "distribution_count": count},
            )
            raise ItemInUseError(item_id, count)

        self.session.delete(item)
        self.session.flush()
        logger.info("item_deleted", extra={"item_id": item_id})

    def list_items(
        self,
        name_like: str | None = None,
        category: ItemCategory | str | None = None,
        in_stock_only: bool = False,
    ) -> list[ItemInfo]:
        """
        List items ordered by id.

        Args:
            name_like: Case-insensitive substring matched against the item
                name or its id rendered as text.
            category: Restrict to one category.
            in_stock_only: Only items with stock > 0.
        """
        stmt = select(Item)
        term = (name_like or "").strip()
        if term:
            stmt = stmt.where(
                or_(
                    Item.name.icontains(term, autoescape=True),
                    cast(Item.id, String).contains(term, autoescape=True),
                )
            )
        if category is not None:
            stmt = stmt.where(Item.category == resolve_category(category).value)
        if in_stock_only:
            stmt = stmt.where(Item.stock > 0)
        stmt = stmt.order_by(Item.id)

        items = self.session.execute(stmt).scalars().all()
        return [ItemInfo.from_model(i) for i in items]

    def category_stock(self, category: ItemCategory | str) -> int:
        """Total stock across all items in a category."""
        resolved = resolve_category(category)
        stmt = select(func.coalesce(func.sum(Item.stock), 0)).where(
            Item.category == resolved.value
        )
        return int(self.session.execute(stmt).scalar_one())
