"""Ordered list controllers with optimistic updates and rollback.

The controller mirrors one remote collection. Local changes are applied
immediately and confirmed (or undone) when the gateway answers:

- reorder: the whole previous sequence is restored on failure.
- publish toggle / single field edit: only that field of that item is
  reverted on failure.

Overlapping requests are not fenced: whichever response arrives last
becomes the local state.
"""

from __future__ import annotations

import logging
from typing import Any

from .client.api_client import CollectionGateway, SkillItemGateway
from .models import Entity, NotFoundError, PortfolioError, SkillCategory
from .notifications import Notifier
from .store import Store

logger = logging.getLogger(__name__)


def move_item(items: list[Any], from_index: int, to_index: int) -> list[Any]:
    """Return a new list with the element at ``from_index`` moved to ``to_index``."""
    size = len(items)
    if not (0 <= from_index < size and 0 <= to_index < size):
        raise IndexError(f"move {from_index} -> {to_index} out of range for {size} items")
    moved = list(items)
    moved.insert(to_index, moved.pop(from_index))
    return moved


class OrderedListController:
    """Local ordered mirror of one collection."""

    def __init__(
        self,
        gateway: CollectionGateway,
        notifier: Notifier | None = None,
        store: Store[list[Entity]] | None = None,
    ):
        self.gateway = gateway
        self.notifier = notifier or Notifier()
        self.store: Store[list[Entity]] = store if store is not None else Store([])

    @property
    def items(self) -> list[Entity]:
        return self.store.get()

    def index_of(self, entity_id: str) -> int:
        for idx, item in enumerate(self.items):
            if item.id == entity_id:
                return idx
        raise KeyError(entity_id)

    def find(self, entity_id: str) -> Entity | None:
        for item in self.items:
            if item.id == entity_id:
                return item
        return None

    def replace(self, entity: Entity) -> None:
        """Swap in a newer copy of one item, keeping its position."""
        self.store.mutate(lambda items: [entity if i.id == entity.id else i for i in items])

    def _revert_field(self, entity_id: str, field: str, previous: Any) -> None:
        current = self.find(entity_id)
        if current is not None:
            self.replace(current.model_copy(update={field: previous}))

    async def load(self) -> list[Entity]:
        """Replace local state with the authoritative remote order."""
        items = await self.gateway.list()
        self.store.set(items)
        return items

    async def reorder(self, from_index: int, to_index: int) -> bool:
        """Move one item and confirm the new order remotely.

        Returns ``True`` when the server confirmed (or nothing had to
        change) and ``False`` when the move was rolled back.
        """
        items = self.items
        moved = move_item(items, from_index, to_index)
        if from_index == to_index:
            return True

        previous = items
        self.store.set(moved)
        ordered_ids = [item.id for item in moved]
        logger.debug("Reordering %s: %s", self.gateway.kind.value, ordered_ids)

        try:
            confirmed = await self.gateway.reorder(ordered_ids)
        except PortfolioError as e:
            self.store.set(previous)
            self.notifier.notify_error(e, "Reorder failed")
            return False

        self.store.set(confirmed)
        return True

    async def set_published(self, entity_id: str, published: bool) -> bool:
        current = self.find(entity_id)
        if current is None:
            raise KeyError(entity_id)
        previous = current.published
        self.replace(current.model_copy(update={"published": published}))

        try:
            updated = await self.gateway.set_published(entity_id, published)
        except PortfolioError as e:
            self._revert_field(entity_id, "published", previous)
            self.notifier.notify_error(e, "Publish change failed")
            return False

        self.replace(updated)
        return True

    async def update_field(self, entity_id: str, field: str, value: Any) -> bool:
        """Optimistically edit one scalar field of one item."""
        current = self.find(entity_id)
        if current is None:
            raise KeyError(entity_id)
        info = type(current).model_fields.get(field)
        if info is None:
            raise KeyError(f"{type(current).__name__} has no field {field!r}")
        previous = getattr(current, field)
        self.replace(current.model_copy(update={field: value}))

        try:
            updated = await self.gateway.update(entity_id, {info.alias or field: value})
        except PortfolioError as e:
            self._revert_field(entity_id, field, previous)
            self.notifier.notify_error(e, "Update failed")
            return False

        self.replace(updated)
        return True

    async def remove(self, entity_id: str) -> bool:
        """Delete remotely, then drop locally.

        A record already gone on the server counts as removed; the
        collection is reloaded so the local list catches up.
        """
        try:
            await self.gateway.delete(entity_id)
        except NotFoundError as e:
            self.notifier.notify_error(e)
            try:
                await self.load()
            except PortfolioError as reload_error:
                self.notifier.notify_error(reload_error, "Reload failed")
            return True
        except PortfolioError as e:
            self.notifier.notify_error(e, "Delete failed")
            return False

        self.store.mutate(lambda items: [i for i in items if i.id != entity_id])
        return True


class SkillItemListController:
    """Reorders skill items inside the categories held by a category controller."""

    def __init__(self, gateway: SkillItemGateway, categories: OrderedListController):
        self.gateway = gateway
        self.categories = categories

    @property
    def notifier(self) -> Notifier:
        return self.categories.notifier

    def _category(self, category_id: str) -> SkillCategory:
        category = self.categories.find(category_id)
        if not isinstance(category, SkillCategory):
            raise KeyError(category_id)
        return category

    async def reorder(self, category_id: str, from_index: int, to_index: int) -> bool:
        previous = self._category(category_id)
        moved = move_item(previous.skills, from_index, to_index)
        if from_index == to_index:
            return True

        self.categories.replace(previous.model_copy(update={"skills": moved}))
        try:
            confirmed = await self.gateway.reorder_items(category_id, [item.id for item in moved])
        except PortfolioError as e:
            self.categories.replace(previous)
            self.notifier.notify_error(e, "Reorder failed")
            return False

        self.categories.replace(confirmed)
        return True

    async def add_item(self, category_id: str, name: str, **fields: Any) -> bool:
        self._category(category_id)
        try:
            updated = await self.gateway.add_item(category_id, name, **fields)
        except PortfolioError as e:
            self.notifier.notify_error(e, "Adding skill failed")
            return False
        self.categories.replace(updated)
        return True

    async def remove_item(self, category_id: str, item_id: str) -> bool:
        category = self._category(category_id)
        try:
            await self.gateway.delete_item(item_id)
        except NotFoundError:
            logger.info("Skill item %s already deleted", item_id)
        except PortfolioError as e:
            self.notifier.notify_error(e, "Removing skill failed")
            return False
        remaining = [item for item in category.skills if item.id != item_id]
        self.categories.replace(category.model_copy(update={"skills": remaining}))
        return True
