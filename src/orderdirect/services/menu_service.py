"""Menu management and the customer menu read model."""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from orderdirect.exceptions import DuplicateCategoryError, StoreUnavailableError
from orderdirect.models.menu_models import Category, MenuItem
from orderdirect.observability.decorators import traced
from orderdirect.observability.metrics import record_category_cascade
from orderdirect.repositories.menu_repositories import CategoryRepository, MenuItemRepository

logger = logging.getLogger(__name__)


@dataclass
class CategoryRenameResult:
    """Outcome of renaming a category and rewriting its items.

    Attributes:
        category_id: The category being renamed
        old_name: Name before the rename
        new_name: Name after the rename
        updated: Items moved to the new name by this call
        failed: Items the store failed to rewrite
        renamed: Whether the category record itself now carries new_name
    """

    category_id: str
    old_name: str
    new_name: str
    updated: int
    failed: int
    renamed: bool

    @property
    def complete(self) -> bool:
        return self.renamed and self.failed == 0


@dataclass
class MenuSection:
    """A category and the items listed under it, for the customer menu."""

    category: Category | None
    items: list[MenuItem]


class MenuService:
    """Service for a restaurant's menu items and categories.

    Items reference their category by name. A rename rewrites the items
    first, each one conditional on still carrying the old name, and renames
    the category record last. A partial failure leaves the category under
    its old name so the same rename can simply be issued again.
    """

    def __init__(
        self, item_repository: MenuItemRepository, category_repository: CategoryRepository
    ) -> None:
        """Initialize the MenuService.

        Args:
            item_repository: Repository for menu items
            category_repository: Repository for categories
        """
        self.item_repository = item_repository
        self.category_repository = category_repository

    async def add_menu_item(
        self,
        restaurant_id: str,
        name: str,
        price: Decimal,
        description: str = "",
        category: str = "",
        image_url: str | None = None,
        available: bool = True,
    ) -> MenuItem:
        """Create a menu item for a restaurant."""
        now = datetime.now(UTC)
        item = MenuItem(
            id=uuid.uuid4().hex,
            restaurant_id=restaurant_id,
            name=name,
            description=description,
            price=price,
            category=category,
            available=available,
            image_url=image_url,
            created_at=now,
            updated_at=now,
        )
        self.item_repository.save_item(item)
        logger.info(f"Added menu item {item.id} to restaurant {restaurant_id}")
        return item

    async def get_menu_item(self, restaurant_id: str, item_id: str) -> MenuItem | None:
        return self.item_repository.get_item(restaurant_id, item_id)

    async def list_menu_items(self, restaurant_id: str) -> list[MenuItem]:
        """All items of a restaurant, available or not (admin view)."""
        return self.item_repository.list_items_for_restaurant(restaurant_id)

    async def list_available_menu_items(self, restaurant_id: str) -> list[MenuItem]:
        """Only the items customers may order."""
        return self.item_repository.list_items_for_restaurant(restaurant_id, available_only=True)

    async def update_menu_item(
        self, restaurant_id: str, item_id: str, updates: dict[str, Any]
    ) -> MenuItem | None:
        """Apply a partial update to a menu item.

        Args:
            restaurant_id: Restaurant that must own the item
            item_id: Menu item identifier
            updates: Field values to change, keyed by MenuItem field name

        Returns:
            The updated item, or None if the restaurant has no such item
        """
        changes = {k: v for k, v in updates.items() if k not in ("id", "restaurant_id")}
        changes["updated_at"] = datetime.now(UTC).isoformat()

        if not self.item_repository.update_item(restaurant_id, item_id, changes):
            return None

        return self.item_repository.get_item(restaurant_id, item_id)

    async def set_availability(
        self, restaurant_id: str, item_id: str, available: bool
    ) -> MenuItem | None:
        """Mark an item as orderable or not."""
        return await self.update_menu_item(restaurant_id, item_id, {"available": available})

    async def delete_menu_item(self, restaurant_id: str, item_id: str) -> bool:
        deleted = self.item_repository.delete_item(restaurant_id, item_id)
        if deleted:
            logger.info(f"Deleted menu item {item_id} from restaurant {restaurant_id}")
        return deleted

    async def add_category(
        self,
        restaurant_id: str,
        name: str,
        description: str | None = None,
        display_order: int = 0,
    ) -> Category:
        """Create a category.

        Raises:
            DuplicateCategoryError: If the restaurant already has a category with this name
        """
        await self._ensure_unique_name(restaurant_id, name)

        now = datetime.now(UTC)
        category = Category(
            id=uuid.uuid4().hex,
            restaurant_id=restaurant_id,
            name=name,
            description=description,
            display_order=display_order,
            created_at=now,
            updated_at=now,
        )
        self.category_repository.save_category(category)
        logger.info(f"Added category {category.id} to restaurant {restaurant_id}")
        return category

    async def get_category(self, restaurant_id: str, category_id: str) -> Category | None:
        return self.category_repository.get_category(restaurant_id, category_id)

    async def list_categories(self, restaurant_id: str) -> list[Category]:
        return self.category_repository.list_categories_for_restaurant(restaurant_id)

    async def update_category(
        self, restaurant_id: str, category_id: str, updates: dict[str, Any]
    ) -> Category | None:
        """Change a category's description or display order.

        A name change goes through rename_category instead, so a "name" key
        in updates is ignored here.
        """
        changes = {
            k: v for k, v in updates.items() if k not in ("id", "restaurant_id", "name")
        }
        changes["updated_at"] = datetime.now(UTC).isoformat()

        if not self.category_repository.update_category(restaurant_id, category_id, changes):
            return None

        return self.category_repository.get_category(restaurant_id, category_id)

    async def delete_category(self, restaurant_id: str, category_id: str) -> bool:
        """Delete a category. Items keep the category name they carry."""
        deleted = self.category_repository.delete_category(restaurant_id, category_id)
        if deleted:
            logger.info(f"Deleted category {category_id} from restaurant {restaurant_id}")
        return deleted

    @traced("rename_category")
    async def rename_category(
        self, restaurant_id: str, category_id: str, new_name: str
    ) -> CategoryRenameResult | None:
        """Rename a category and every item that references it by name.

        Safe to repeat after a partial failure: items already moved are
        skipped, and the remaining ones are picked up by the next call.

        Returns:
            CategoryRenameResult, or None if the restaurant has no such category

        Raises:
            DuplicateCategoryError: If another category already uses new_name
            StoreUnavailableError: If listing the affected items fails
        """
        category = self.category_repository.get_category(restaurant_id, category_id)
        if category is None:
            return None

        old_name = category.name
        if old_name == new_name:
            return CategoryRenameResult(category_id, old_name, new_name, 0, 0, renamed=True)

        await self._ensure_unique_name(restaurant_id, new_name, exclude_id=category_id)

        updated_at = datetime.now(UTC).isoformat()
        updated = 0
        failed = 0

        for item in self.item_repository.list_items_in_category(restaurant_id, old_name):
            try:
                if self.item_repository.rename_item_category(
                    restaurant_id, item.id, old_name, new_name, updated_at
                ):
                    updated += 1
            except StoreUnavailableError:
                failed += 1

        renamed = False
        if failed:
            logger.error(
                f"Category {category_id} rename to {new_name} left {failed} item(s) "
                f"under {old_name}, category record not renamed"
            )
        else:
            renamed = self.category_repository.update_category(
                restaurant_id, category_id, {"name": new_name, "updated_at": updated_at}
            )

        record_category_cascade(restaurant_id, updated, failed)
        logger.info(
            f"Renamed category {category_id} from {old_name} to {new_name}: "
            f"{updated} item(s) updated, {failed} failed"
        )
        return CategoryRenameResult(category_id, old_name, new_name, updated, failed, renamed)

    async def get_customer_menu(self, restaurant_id: str) -> list[MenuSection]:
        """Available items grouped by category in display order.

        Items whose category name matches no category record are collected
        in a trailing section without a category.
        """
        categories = self.category_repository.list_categories_for_restaurant(restaurant_id)
        items = self.item_repository.list_items_for_restaurant(restaurant_id, available_only=True)

        by_name: dict[str, list[MenuItem]] = {}
        for item in items:
            by_name.setdefault(item.category, []).append(item)

        sections = [
            MenuSection(category=c, items=by_name.pop(c.name, [])) for c in categories
        ]

        leftovers = [item for group in by_name.values() for item in group]
        if leftovers:
            sections.append(MenuSection(category=None, items=leftovers))

        return sections

    async def _ensure_unique_name(
        self, restaurant_id: str, name: str, exclude_id: str | None = None
    ) -> None:
        for existing in self.category_repository.list_categories_for_restaurant(restaurant_id):
            if existing.name == name and existing.id != exclude_id:
                raise DuplicateCategoryError(f"Category '{name}' already exists")
