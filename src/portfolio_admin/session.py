"""Editing session: one open draft per admin screen.

State machine::

    CLOSED --open_new/open_existing--> EDITING --save--> SAVING --ok--> CLOSED
                                          ^                 |
                                          +----failure------+
    EDITING --cancel--> CLOSED

Nothing reaches the server until ``save()``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from .client.api_client import CollectionGateway
from .client.bullet_reconcile import reconcile_bullets
from .controller import OrderedListController
from .drafts import BulletedDraft, Draft, draft_from_entity, new_draft
from .models import AuthError, Bullet, Entity, NotFoundError, PortfolioError
from .notifications import NOT_FOUND_MESSAGE, Notifier, describe_error

logger = logging.getLogger(__name__)

STALE_BULLET_MESSAGE = "A bullet was removed elsewhere. Save again to restore it"


class SessionState(str, Enum):
    CLOSED = "closed"
    EDITING = "editing"
    SAVING = "saving"


class SessionError(RuntimeError):
    """Operation not allowed in the session's current state."""


class EditingSession:
    """Loads one record into a draft and saves it back.

    Saving runs the scalar create/update, then reconciles the bullet list
    against the last server-confirmed bullets, then reloads the collection
    through the controller.
    """

    def __init__(
        self,
        gateway: CollectionGateway,
        controller: OrderedListController,
        notifier: Notifier | None = None,
    ):
        self.gateway = gateway
        self.controller = controller
        self.notifier = notifier or controller.notifier
        self.state = SessionState.CLOSED
        self.draft: Draft | None = None
        self.entity_id: str | None = None
        self.baseline: list[Bullet] = []
        self.error: str | None = None
        self.last_sync: dict[str, Any] | None = None
        # Bumped whenever the draft is discarded; a save finishing under an
        # older generation has its result dropped.
        self._generation = 0

    @property
    def is_open(self) -> bool:
        return self.state is not SessionState.CLOSED

    @property
    def is_new(self) -> bool:
        return self.entity_id is None

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            raise SessionError(f"not allowed while {self.state.value}")

    def _reset(self) -> None:
        self._generation += 1
        self.state = SessionState.CLOSED
        self.draft = None
        self.entity_id = None
        self.baseline = []
        self.error = None

    def open_new(self) -> Draft:
        self._require(SessionState.CLOSED, SessionState.EDITING)
        self._reset()
        self.draft = new_draft(self.gateway.kind)
        self.state = SessionState.EDITING
        return self.draft

    def open_existing(self, entity: Entity) -> Draft:
        self._require(SessionState.CLOSED, SessionState.EDITING)
        self._reset()
        self.draft = draft_from_entity(self.gateway.kind, entity)
        self.entity_id = entity.id
        self.baseline = list(getattr(entity, "bullets", []))
        self.state = SessionState.EDITING
        return self.draft

    def cancel(self) -> None:
        """Discard the draft. An in-flight save keeps running but its result is ignored."""
        if self.state is SessionState.SAVING:
            logger.info("Draft for %s discarded while saving", self.entity_id or "new record")
        self._reset()

    def close_if_editing(self, entity_id: str) -> bool:
        """Close the draft when it belongs to ``entity_id``."""
        if self.is_open and self.entity_id == entity_id:
            self._reset()
            return True
        return False

    def _fail(self, exc: PortfolioError, generation: int, message: str | None = None) -> None:
        if generation != self._generation:
            logger.info("Dropping failure of a discarded save: %s", exc)
            return
        self.state = SessionState.EDITING
        if message is None:
            self.error = describe_error(exc)
            self.notifier.notify_error(exc, "Save failed")
        else:
            logger.warning("%s (%s)", message, exc)
            self.error = message
            self.notifier.error(message)

    async def save(self) -> Entity | None:
        """Persist the draft.

        Returns the reloaded entity, or ``None`` when the save failed (the
        session is back in EDITING with ``error`` set) or was discarded.
        """
        self._require(SessionState.EDITING)
        draft = self.draft
        try:
            draft.check_required()
        except PortfolioError as e:
            self.error = describe_error(e)
            self.notifier.notify_error(e, "Save failed")
            return None

        generation = self._generation
        self.state = SessionState.SAVING
        self.error = None
        payload = draft.to_payload()
        entity_id = self.entity_id
        baseline = list(self.baseline)

        try:
            if entity_id is None:
                saved = await self.gateway.create(payload)
                baseline = list(getattr(saved, "bullets", []))
                # A retried save must update, not create a second record
                if generation == self._generation:
                    self.entity_id = saved.id
                    self.baseline = baseline
            else:
                saved = await self.gateway.update(entity_id, payload)

            if isinstance(draft, BulletedDraft):
                self.last_sync = await reconcile_bullets(
                    saved.id,
                    draft.bullets,
                    baseline,
                    add_bullet=self.gateway.add_bullet,
                    update_bullet=self.gateway.update_bullet,
                    delete_bullet=self.gateway.delete_bullet,
                    log_debug_msg=logger.debug,
                )
                if generation == self._generation:
                    self.baseline = list(self.last_sync["bullets"])

            await self.controller.load()
        except NotFoundError as e:
            if e.resource_id in (None, entity_id, self.entity_id):
                await self._handle_gone(e, generation)
            elif await self._refresh_baseline(generation):
                self._fail(e, generation, STALE_BULLET_MESSAGE)
            else:
                await self._handle_gone(e, generation)
            return None
        except AuthError as e:
            self._fail(e, generation)
            return None
        except PortfolioError as e:
            if await self._refresh_baseline(generation):
                self._fail(e, generation)
            else:
                await self._handle_gone(NotFoundError(resource_id=self.entity_id), generation)
            return None

        if generation != self._generation:
            logger.info("Save of %s finished after the draft was discarded", saved.id)
            return None

        reloaded = self.controller.find(saved.id) or saved
        self._reset()
        self.notifier.success("Saved")
        return reloaded

    async def _refresh_baseline(self, generation: int) -> bool:
        """After a partial save, pick up whatever bullets the server now has.

        Returns ``False`` when the record itself no longer exists.
        """
        if self.entity_id is None or not isinstance(self.draft, BulletedDraft):
            return True
        try:
            fresh = await self.gateway.get(self.entity_id)
        except NotFoundError:
            return False
        except PortfolioError as e:
            logger.warning("Could not refresh bullets of %s: %s", self.entity_id, e)
            return True
        if generation == self._generation:
            self.baseline = list(getattr(fresh, "bullets", []))
        return True

    async def _handle_gone(self, exc: NotFoundError, generation: int) -> None:
        """The record was removed elsewhere: drop the stale draft and reload."""
        if generation != self._generation:
            return
        logger.warning("Record %s no longer exists: %s", self.entity_id, exc)
        self._reset()
        self.error = NOT_FOUND_MESSAGE
        self.notifier.error(NOT_FOUND_MESSAGE)
        try:
            await self.controller.load()
        except PortfolioError as reload_error:
            self.notifier.notify_error(reload_error, "Reload failed")
