"""pytest configuration and fixtures for portfolio-admin tests."""

import itertools

import pytest

from portfolio_admin.client.api_client import sort_entities
from portfolio_admin.client.resources import get_resource
from portfolio_admin.controller import OrderedListController
from portfolio_admin.models import Bullet, Experience, NotFoundError, ResourceKind
from portfolio_admin.notifications import Notifier
from portfolio_admin.session import EditingSession


class FakeGateway:
    """In-memory stand-in for the experience collection on the server.

    Every call is recorded in ``calls`` as ``(op, *args)``. ``fail(op, exc)``
    makes the next matching call raise instead of touching state.
    """

    def __init__(self):
        self.spec = get_resource(ResourceKind.EXPERIENCE)
        self.records: dict[str, Experience] = {}
        self.calls: list[tuple] = []
        self._failures: list[tuple] = []
        self._ids = itertools.count(1)

    @property
    def kind(self):
        return self.spec.kind

    # -- test helpers -------------------------------------------------
    def seed(self, company: str, bullets: list[str] | None = None, **fields) -> Experience:
        entity_id = f"e{next(self._ids)}"
        exp = Experience(
            id=entity_id,
            company=company,
            role=fields.pop("role", "Engineer"),
            sort_order=(len(self.records) + 1) * 10,
            bullets=[
                Bullet(id=f"b{next(self._ids)}", content=text, sort_order=idx)
                for idx, text in enumerate(bullets or [])
            ],
            **fields,
        )
        self.records[entity_id] = exp
        return self._echo(entity_id)

    def fail(self, op: str, exc: Exception, when=None) -> None:
        self._failures.append((op, exc, when))

    def ops(self, *names: str) -> list[tuple]:
        return [c for c in self.calls if not names or c[0] in names]

    def bullet_texts(self, owner_id: str) -> list[str]:
        return [b.content for b in sort_entities(self.records[owner_id].bullets)]

    def _enter(self, op: str, *args) -> None:
        self.calls.append((op, *args))
        for failure in self._failures:
            name, exc, when = failure
            if name == op and (when is None or when(*args)):
                self._failures.remove(failure)
                raise exc

    def _owner(self, owner_id: str) -> Experience:
        if owner_id not in self.records:
            raise NotFoundError(resource_id=owner_id)
        return self.records[owner_id]

    def _echo(self, owner_id: str) -> Experience:
        exp = self.records[owner_id]
        return exp.model_copy(update={"bullets": sort_entities([b.model_copy() for b in exp.bullets])})

    # -- gateway surface ----------------------------------------------
    async def list(self):
        self._enter("list")
        return sort_entities([self._echo(i) for i in self.records])

    async def get(self, entity_id):
        self._enter("get", entity_id)
        self._owner(entity_id)
        return self._echo(entity_id)

    async def create(self, fields):
        self._enter("create", fields)
        entity_id = f"e{next(self._ids)}"
        top = max((r.sort_order for r in self.records.values()), default=0)
        exp = Experience.model_validate({**fields, "id": entity_id, "sortOrder": top + 10, "bullets": []})
        self.records[entity_id] = exp
        return self._echo(entity_id)

    async def update(self, entity_id, fields):
        self._enter("update", entity_id, fields)
        current = self._owner(entity_id)
        merged = {**current.model_dump(by_alias=True), **fields}
        self.records[entity_id] = Experience.model_validate(merged)
        return self._echo(entity_id)

    async def delete(self, entity_id):
        self._enter("delete", entity_id)
        self._owner(entity_id)
        del self.records[entity_id]
        return True

    async def set_published(self, entity_id, published):
        self._enter("set_published", entity_id, published)
        self.records[entity_id] = self._owner(entity_id).model_copy(update={"published": published})
        return self._echo(entity_id)

    async def reorder(self, ordered_ids):
        self._enter("reorder", list(ordered_ids))
        for idx, entity_id in enumerate(ordered_ids):
            self.records[entity_id] = self._owner(entity_id).model_copy(update={"sort_order": (idx + 1) * 100})
        return sort_entities([self._echo(i) for i in self.records])

    async def add_bullet(self, owner_id, content):
        self._enter("add_bullet", owner_id, content)
        owner = self._owner(owner_id)
        top = max((b.sort_order for b in owner.bullets), default=-1)
        owner.bullets.append(Bullet(id=f"b{next(self._ids)}", content=content, sort_order=top + 1))
        return self._echo(owner_id)

    async def update_bullet(self, owner_id, bullet_id, content, sort_order):
        self._enter("update_bullet", owner_id, bullet_id, content, sort_order)
        owner = self._owner(owner_id)
        for bullet in owner.bullets:
            if bullet.id == bullet_id:
                bullet.content = content
                bullet.sort_order = sort_order
                return self._echo(owner_id)
        raise NotFoundError(resource_id=bullet_id)

    async def delete_bullet(self, owner_id, bullet_id):
        self._enter("delete_bullet", owner_id, bullet_id)
        owner = self._owner(owner_id)
        remaining = [b for b in owner.bullets if b.id != bullet_id]
        if len(remaining) == len(owner.bullets):
            raise NotFoundError(resource_id=bullet_id)
        owner.bullets = remaining
        return self._echo(owner_id)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def controller(gateway, notifier):
    return OrderedListController(gateway, notifier)


@pytest.fixture
def session(gateway, controller, notifier):
    return EditingSession(gateway, controller, notifier)
