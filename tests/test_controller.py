"""Tests for the ordered list controller."""

import asyncio

import pytest

from portfolio_admin.controller import move_item
from portfolio_admin.models import AuthError, NotFoundError, ServerError, TransportError, ValidationError


async def _loaded(gateway, controller, *names):
    for name in names:
        gateway.seed(name)
    await controller.load()
    return controller.items


def _companies(items):
    return [i.company for i in items]


def test_move_item_returns_new_list():
    items = ["A", "B", "C"]
    assert move_item(items, 2, 0) == ["C", "A", "B"]
    assert move_item(items, 0, 2) == ["B", "C", "A"]
    assert items == ["A", "B", "C"]


def test_move_item_rejects_out_of_range():
    with pytest.raises(IndexError):
        move_item(["A"], 0, 1)
    with pytest.raises(IndexError):
        move_item([], 0, 0)


async def test_load_sorts_by_sort_order(gateway, controller):
    items = await _loaded(gateway, controller, "A", "B", "C")
    assert _companies(items) == ["A", "B", "C"]


async def test_reorder_success_takes_server_echo(gateway, controller):
    await _loaded(gateway, controller, "A", "B", "C")

    assert await controller.reorder(2, 0) is True

    assert _companies(controller.items) == ["C", "A", "B"]
    # Server recomputed the numbers; only relative order matches the request
    assert [i.sort_order for i in controller.items] == [100, 200, 300]
    assert gateway.ops("reorder") == [("reorder", ["e3", "e1", "e2"])]


async def test_reorder_failure_restores_exact_previous_sequence(gateway, controller, notifier):
    before = await _loaded(gateway, controller, "A", "B", "C")
    gateway.fail("reorder", ServerError("boom"))

    assert await controller.reorder(2, 0) is False

    after = controller.items
    assert _companies(after) == ["A", "B", "C"]
    assert after is before
    assert all(a is b for a, b in zip(after, before))
    assert len(notifier.notifications) == 1
    assert notifier.notifications[0].level == "error"


async def test_reorder_applies_optimistically_before_response(gateway, controller):
    await _loaded(gateway, controller, "A", "B", "C")
    seen = []
    controller.store.subscribe(lambda items: seen.append(_companies(items)))

    await controller.reorder(0, 2)

    assert seen[0] == ["B", "C", "A"]
    assert seen[-1] == ["B", "C", "A"]


async def test_reorder_same_index_is_noop(gateway, controller):
    await _loaded(gateway, controller, "A", "B", "C")
    await controller.reorder(2, 0)
    gateway.calls.clear()

    assert await controller.reorder(1, 1) is True

    assert _companies(controller.items) == ["C", "A", "B"]
    assert gateway.calls == []


async def test_reorder_out_of_range_raises(gateway, controller):
    await _loaded(gateway, controller, "A", "B")
    with pytest.raises(IndexError):
        await controller.reorder(0, 5)
    assert gateway.ops("reorder") == []


async def test_overlapping_reorders_last_response_wins(gateway, controller):
    await _loaded(gateway, controller, "A", "B", "C")
    release_first = asyncio.Event()
    original = gateway.reorder
    calls = 0

    async def slow_first(ordered_ids):
        nonlocal calls
        calls += 1
        if calls == 1:
            await release_first.wait()
        return await original(ordered_ids)

    gateway.reorder = slow_first

    first = asyncio.create_task(controller.reorder(0, 2))  # B C A
    await asyncio.sleep(0)
    second = await controller.reorder(0, 1)  # C B A
    assert second is True
    release_first.set()
    await first

    # The first request's echo arrived last and is taken as authoritative
    assert _companies(controller.items) == ["B", "C", "A"]


async def test_set_published_success(gateway, controller):
    await _loaded(gateway, controller, "A")
    assert await controller.set_published("e1", True) is True
    assert controller.items[0].published is True
    assert gateway.records["e1"].published is True


async def test_set_published_failure_reverts_only_that_field(gateway, controller, notifier):
    await _loaded(gateway, controller, "A", "B")
    gateway.fail("set_published", TransportError())

    assert await controller.set_published("e2", True) is False

    assert [i.published for i in controller.items] == [False, False]
    assert _companies(controller.items) == ["A", "B"]
    assert "Network problem" in notifier.notifications[-1].message


async def test_update_field_failure_reverts(gateway, controller):
    await _loaded(gateway, controller, "A")
    gateway.fail("update", ValidationError("company is too long"))

    assert await controller.update_field("e1", "company", "X" * 500) is False
    assert controller.items[0].company == "A"


async def test_update_field_sends_wire_alias(gateway, controller):
    await _loaded(gateway, controller, "A")
    assert await controller.update_field("e1", "tech_stack", "Python") is True
    assert gateway.ops("update") == [("update", "e1", {"techStack": "Python"})]
    assert controller.items[0].tech_stack == "Python"


async def test_remove_drops_item_after_confirmation(gateway, controller):
    await _loaded(gateway, controller, "A", "B")
    assert await controller.remove("e1") is True
    assert _companies(controller.items) == ["B"]


async def test_remove_failure_keeps_item(gateway, controller):
    await _loaded(gateway, controller, "A", "B")
    gateway.fail("delete", ServerError())
    assert await controller.remove("e1") is False
    assert _companies(controller.items) == ["A", "B"]


async def test_remove_stale_item_reloads(gateway, controller, notifier):
    await _loaded(gateway, controller, "A", "B")
    del gateway.records["e1"]  # removed by another process

    assert await controller.remove("e1") is True

    assert _companies(controller.items) == ["B"]
    assert notifier.notifications[-1].message == "This item no longer exists"


async def test_auth_error_invalidates_operator_session(gateway, controller, notifier):
    lost = []
    notifier.on_auth_lost = lambda: lost.append(True)
    await _loaded(gateway, controller, "A", "B")
    gateway.fail("reorder", AuthError())

    assert await controller.reorder(0, 1) is False
    assert lost == [True]
    assert _companies(controller.items) == ["A", "B"]


async def test_load_propagates_errors(gateway, controller):
    gateway.fail("list", NotFoundError())
    with pytest.raises(NotFoundError):
        await controller.load()


async def test_replace_swaps_item_in_place(gateway, controller):
    items = await _loaded(gateway, controller, "A", "B", "C")

    controller.replace(items[1].model_copy(update={"company": "B2"}))

    assert _companies(controller.items) == ["A", "B2", "C"]
    assert gateway.ops("update") == []
