"""Admin screens: one controller + one editing session per collection."""

from __future__ import annotations

import logging
from typing import Any

from .client.api_client import CollectionGateway, PortfolioClient
from .controller import OrderedListController, SkillItemListController
from .drafts import BulletedDraft, Draft
from .models import Entity, PortfolioError, ResourceKind
from .notifications import Notifier
from .session import EditingSession

logger = logging.getLogger(__name__)


class AdminScreen:
    """Everything the operator can do on one collection's screen."""

    def __init__(self, gateway: CollectionGateway, notifier: Notifier):
        self.gateway = gateway
        self.notifier = notifier
        self.controller = OrderedListController(gateway, notifier)
        self.session = EditingSession(gateway, self.controller, notifier)

    @property
    def kind(self) -> ResourceKind:
        return self.gateway.kind

    @property
    def items(self) -> list[Entity]:
        return self.controller.items

    async def refresh(self) -> bool:
        try:
            await self.controller.load()
        except PortfolioError as e:
            self.notifier.notify_error(e, f"Loading {self.gateway.spec.label} list failed")
            return False
        return True

    async def reorder(self, from_index: int, to_index: int) -> bool:
        return await self.controller.reorder(from_index, to_index)

    async def set_published(self, entity_id: str, published: bool) -> bool:
        return await self.controller.set_published(entity_id, published)

    async def delete(self, entity_id: str) -> bool:
        removed = await self.controller.remove(entity_id)
        if removed and self.session.close_if_editing(entity_id):
            logger.info("Closed draft of deleted %s %s", self.gateway.spec.label, entity_id)
        return removed

    def new_draft(self) -> Draft:
        return self.session.open_new()

    def edit(self, entity_id: str) -> Draft:
        entity = self.controller.find(entity_id)
        if entity is None:
            raise KeyError(entity_id)
        return self.session.open_existing(entity)

    @property
    def draft(self) -> Draft | None:
        return self.session.draft

    def bulleted_draft(self) -> BulletedDraft:
        draft = self.session.draft
        if not isinstance(draft, BulletedDraft):
            raise TypeError(f"{self.gateway.spec.label} drafts have no bullets")
        return draft

    def cancel(self) -> None:
        self.session.cancel()

    async def save(self) -> Entity | None:
        return await self.session.save()

    def describe(self) -> dict[str, Any]:
        session = self.session
        return {
            "kind": self.kind.value,
            "items": [item.model_dump(by_alias=True) for item in self.items],
            "session": {
                "state": session.state.value,
                "entity_id": session.entity_id,
                "error": session.error,
                "draft": session.draft.model_dump(by_alias=True) if session.draft else None,
            },
        }


class AdminConsole:
    """All admin screens of one operator session."""

    def __init__(self, client: PortfolioClient):
        self.client = client
        self.notifier = Notifier(on_auth_lost=self.invalidate)
        self.screens: dict[ResourceKind, AdminScreen] = {
            kind: AdminScreen(client.gateway(kind), self.notifier) for kind in ResourceKind
        }
        self.skill_items = SkillItemListController(
            client.skill_items(), self.screens[ResourceKind.SKILL_CATEGORY].controller
        )

    def screen(self, kind: ResourceKind | str) -> AdminScreen:
        return self.screens[ResourceKind(kind)]

    @property
    def authenticated(self) -> bool:
        return self.client.is_authenticated

    async def login(self, email: str, password: str) -> bool:
        try:
            await self.client.login(email, password)
        except PortfolioError as e:
            self.notifier.notify_error(e, "Sign-in failed")
            return False
        return True

    def invalidate(self) -> None:
        """Forget the token; the operator must sign in again. Open drafts are kept."""
        logger.warning("Credentials rejected - signing out")
        self.client.logout()

    async def refresh_all(self) -> None:
        for screen in self.screens.values():
            await screen.refresh()
