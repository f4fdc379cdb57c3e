"""Portfolio admin API client - per-collection gateways."""

from __future__ import annotations

from typing import Any

from ..models import Entity, ResourceKind, SkillCategory
from .api_client_core import PortfolioClientCore, _ClientLogger
from .resources import SKILL_ITEMS_PATH, ResourceSpec, get_resource

logger = _ClientLogger("GATEWAY")


def sort_entities(entities: list[Any]) -> list[Any]:
    """Order by sort_order ascending, ties broken by id."""
    return sorted(entities, key=lambda e: (e.sort_order, e.id or ""))


class CollectionGateway:
    """Remote operations for one collection kind.

    All responses are normalized to the collection's entity model.
    """

    def __init__(self, core: PortfolioClientCore, spec: ResourceSpec):
        self.core = core
        self.spec = spec

    @property
    def kind(self) -> ResourceKind:
        return self.spec.kind

    def _entity(self, data: dict[str, Any]) -> Entity:
        entity = self.spec.model.model_validate(data)
        bullets = getattr(entity, "bullets", None)
        if bullets:
            entity.bullets = sort_entities(bullets)
        return entity

    def _entities(self, data: list[dict[str, Any]] | None) -> list[Entity]:
        return sort_entities([self._entity(item) for item in data or []])

    async def list(self) -> list[Entity]:
        data = await self.core.request("GET", self.spec.path)
        return self._entities(data)

    async def get(self, entity_id: str) -> Entity:
        data = await self.core.request("GET", self.spec.item_path(entity_id), resource_id=entity_id)
        return self._entity(data)

    async def create(self, fields: dict[str, Any]) -> Entity:
        data = await self.core.request("POST", self.spec.path, fields)
        entity = self._entity(data)
        logger.info(f"Created {self.spec.label} {entity.id}")
        return entity

    async def update(self, entity_id: str, fields: dict[str, Any]) -> Entity:
        data = await self.core.request("PUT", self.spec.item_path(entity_id), fields, resource_id=entity_id)
        return self._entity(data)

    async def delete(self, entity_id: str) -> bool:
        await self.core.request("DELETE", self.spec.item_path(entity_id), resource_id=entity_id)
        logger.info(f"Deleted {self.spec.label} {entity_id}")
        return True

    async def set_published(self, entity_id: str, published: bool) -> Entity:
        data = await self.core.request(
            "PATCH",
            f"{self.spec.item_path(entity_id)}/publish",
            {self.spec.publish_key: published},
            resource_id=entity_id,
        )
        return self._entity(data)

    async def reorder(self, ordered_ids: list[str]) -> list[Entity]:
        """Persist an explicit total order; returns the collection as confirmed."""
        data = await self.core.request("PUT", self.spec.reorder_path, {"orderedIds": list(ordered_ids)})
        return self._entities(data)

    def _require_bullets(self) -> None:
        if not self.spec.has_bullets:
            raise TypeError(f"{self.spec.label} records have no bullets")

    async def add_bullet(self, owner_id: str, content: str) -> Entity:
        self._require_bullets()
        data = await self.core.request(
            "POST", self.spec.bullets_path(owner_id), {"content": content}, resource_id=owner_id
        )
        return self._entity(data)

    async def update_bullet(self, owner_id: str, bullet_id: str, content: str, sort_order: int) -> Entity:
        self._require_bullets()
        data = await self.core.request(
            "PUT",
            f"{self.spec.bullets_path(owner_id)}/{bullet_id}",
            {"content": content, "sortOrder": sort_order},
            resource_id=bullet_id,
        )
        return self._entity(data)

    async def delete_bullet(self, owner_id: str, bullet_id: str) -> Entity:
        self._require_bullets()
        data = await self.core.request(
            "DELETE", f"{self.spec.bullets_path(owner_id)}/{bullet_id}", resource_id=bullet_id
        )
        return self._entity(data)


class SkillItemGateway:
    """Skill items, scoped to their owning category."""

    def __init__(self, core: PortfolioClientCore):
        self.core = core

    @staticmethod
    def _category(data: dict[str, Any]) -> SkillCategory:
        category = SkillCategory.model_validate(data)
        category.skills = sort_entities(category.skills)
        return category

    async def add_item(self, category_id: str, name: str, **fields: Any) -> SkillCategory:
        body = {"categoryId": category_id, "name": name, **fields}
        return self._category(await self.core.request("POST", SKILL_ITEMS_PATH, body, resource_id=category_id))

    async def update_item(self, item_id: str, fields: dict[str, Any]) -> SkillCategory:
        return self._category(await self.core.request("PUT", f"{SKILL_ITEMS_PATH}/{item_id}", fields))

    async def delete_item(self, item_id: str) -> bool:
        await self.core.request("DELETE", f"{SKILL_ITEMS_PATH}/{item_id}")
        return True

    async def reorder_items(self, category_id: str, ordered_ids: list[str]) -> SkillCategory:
        body = {
            "categoryId": category_id,
            "orderedIds": list(ordered_ids),
            "items": [{"id": item_id, "sortOrder": idx} for idx, item_id in enumerate(ordered_ids)],
        }
        return self._category(
            await self.core.request("PUT", f"{SKILL_ITEMS_PATH}/reorder", body, resource_id=category_id)
        )


class PortfolioClient(PortfolioClientCore):
    """Admin API client handing out one gateway per collection."""

    def gateway(self, kind: ResourceKind | str) -> CollectionGateway:
        return CollectionGateway(self, get_resource(kind))

    def skill_items(self) -> SkillItemGateway:
        return SkillItemGateway(self)
