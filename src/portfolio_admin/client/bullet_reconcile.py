"""
Bullet list reconciliation for one owning record.

The bullet endpoints only offer add / update / delete of a single bullet
(there is no "replace all bullets" call), so converging the server to the
list the operator edited offline takes a sequence of per-bullet calls.

Phases (strictly sequential, each awaited before the next):
  1) DELETE  - existing bullets whose id no longer appears in the desired list
  2) CREATE  - desired bullets without an id; the new id is correlated back by
               exact content and written onto the draft bullet immediately
  3) UPDATE  - every desired bullet, in final order, gets (content, index);
               this pass fixes both edited text and ordering because the only
               way to order bullets is their per-item sortOrder

Failure policy:
  - The first failing call aborts the run and propagates. Nothing is rolled
    back; already-applied operations stay applied.
  - Ids written back in phase 2 survive the failure, so running again with
    the same draft finishes the job without creating duplicates.
  - A delete answering NotFoundError is treated as already done.
  - An update answering NotFoundError for the bullet clears the draft's id
    before propagating, so the next run creates the bullet again.

To integrate, wire the gateway calls:
  - add_bullet(owner_id, content) -> owner entity (with .bullets)
  - update_bullet(owner_id, bullet_id, content, sort_order) -> owner entity
  - delete_bullet(owner_id, bullet_id) -> owner entity
"""
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from ..drafts import DraftBullet
from ..models import Bullet, NotFoundError, ReconciliationError

AddBullet = Callable[[str, str], Awaitable[Any]]
UpdateBullet = Callable[[str, str, str, int], Awaitable[Any]]
DeleteBullet = Callable[[str, str], Awaitable[Any]]


def plan_bullet_sync(desired: Sequence[DraftBullet], existing: Sequence[Bullet]) -> Dict[str, Any]:
    """Compute the operations a reconcile run would issue, without any I/O.

    Creates report ``id=None``; their updates are listed against the draft's
    ``local_key`` because the server id is not known yet.
    """
    desired_ids = {d.id for d in desired if d.id is not None}
    deletes = [b.id for b in existing if b.id is not None and b.id not in desired_ids]
    creates = [{'local_key': d.local_key, 'content': d.content} for d in desired if d.id is None]
    updates = [
        {'id': d.id, 'local_key': d.local_key, 'content': d.content, 'sort_order': idx}
        for idx, d in enumerate(desired)
    ]
    return {
        'counts': {'deletes': len(deletes), 'creates': len(creates), 'updates': len(updates)},
        'deletes': deletes,
        'creates': creates,
        'updates': updates,
    }


async def reconcile_bullets(
    owner_id: str,
    desired: Sequence[DraftBullet],
    existing: Sequence[Bullet],
    add_bullet: AddBullet,
    update_bullet: UpdateBullet,
    delete_bullet: DeleteBullet,
    dry_run: bool = False,
    skip_unchanged: bool = False,
    log_debug_msg: Optional[Callable[[str], None]] = None,
) -> Dict[str, Any]:
    """
    Converge the server's bullets for ``owner_id`` to ``desired``.

    - desired: draft bullets in operator order; ``id`` None means "new".
    - existing: last server-confirmed bullets for the owner.
    - dry_run: return the plan, issue nothing.
    - skip_unchanged: omit phase-3 updates for bullets whose content already
      matches and whose position is right, either because the server lists
      the bullets in the desired order or because its sortOrder equals the
      index.

    Returns a summary dict with per-phase operations, counts and, unless
    dry_run, ``bullets``: the owner's bullets from the last server response.
    """

    def log(msg: str) -> None:
        if log_debug_msg:
            timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
            log_debug_msg(f"[{timestamp}] {msg}")

    plan = plan_bullet_sync(desired, existing)
    log(
        f"[RECONCILE] owner={owner_id} desired={len(desired)} existing={len(existing)} "
        f"dry_run={dry_run} skip_unchanged={skip_unchanged}"
    )

    if dry_run:
        for bid in plan['deletes']:
            log(f"   [DRY-RUN] Would DELETE bullet {bid}")
        for c in plan['creates']:
            log(f"   [DRY-RUN] Would CREATE bullet {c['content']!r}")
        for u in plan['updates']:
            log(f"   [DRY-RUN] Would UPDATE {u['id'] or u['local_key']} -> pos {u['sort_order']}")
        return {**plan, 'owner_id': owner_id, 'dry_run': True, 'skipped': 0}

    # Latest known server state: id -> (content, sort_order)
    remote: Dict[str, tuple] = {b.id: (b.content, b.sort_order) for b in existing if b.id}
    final_bullets: List[Bullet] = list(existing)

    def absorb(owner: Any) -> None:
        nonlocal final_bullets
        bullets = getattr(owner, 'bullets', None)
        if bullets is None:
            return
        final_bullets = list(bullets)
        remote.clear()
        remote.update({b.id: (b.content, b.sort_order) for b in bullets if b.id})

    # ------------- phase 1: DELETE -------------
    log("\n[PHASE 1] DELETE")
    deleted: List[str] = []
    for bid in plan['deletes']:
        try:
            log(f"   >>> DELETE bullet {bid}")
            absorb(await delete_bullet(owner_id, bid))
        except NotFoundError:
            log(f"   >>> bullet {bid} already gone, skipping")
            remote.pop(bid, None)
            final_bullets = [b for b in final_bullets if b.id != bid]
        except Exception as e:
            log(f"   >>> DELETE FAILED for {bid}: {type(e).__name__}: {e}")
            raise
        deleted.append(bid)
    log(f"   DELETE phase complete - {len(deleted)} bullets")

    # ------------- phase 2: CREATE -------------
    log("\n[PHASE 2] CREATE")
    known_ids = set(remote) | {d.id for d in desired if d.id}
    created: List[Dict[str, Any]] = []
    for d in desired:
        if d.id is not None:
            continue
        try:
            log(f"   >>> CREATE bullet {d.content!r} (key {d.local_key})")
            owner = await add_bullet(owner_id, d.content)
        except Exception as e:
            log(f"   >>> CREATE FAILED for {d.local_key}: {type(e).__name__}: {e}")
            raise
        absorb(owner)

        # Correlate by content among ids this run has not seen yet; the
        # server appends, so the newest match is last.
        matches = [b for b in final_bullets if b.content == d.content and b.id not in known_ids]
        if not matches:
            log(f"   >>> CREATE response has no new bullet matching {d.content!r}")
            raise ReconciliationError(d.content)
        new_id = matches[-1].id
        d.id = new_id
        known_ids.add(new_id)
        created.append({'id': new_id, 'local_key': d.local_key, 'content': d.content})
        log(f"   >>> CREATE SUCCESS {d.local_key} -> {new_id}")
    log(f"   CREATE phase complete - {len(created)} bullets")

    # ------------- phase 3: UPDATE content + position -------------
    log("\n[PHASE 3] UPDATE content and position")
    # Server numbering may not be 0-based; when it already lists the bullets
    # in the desired order, content-only updates keep its sortOrder values.
    in_order = skip_unchanged and [
        b.id for b in sorted(final_bullets, key=lambda b: (b.sort_order, b.id or ""))
    ] == [d.id for d in desired]
    updated: List[Dict[str, Any]] = []
    skipped = 0
    for idx, d in enumerate(desired):
        content, position = remote.get(d.id, (None, None))
        if skip_unchanged and content == d.content and (in_order or position == idx):
            skipped += 1
            continue
        sort_order = position if in_order and position is not None else idx
        try:
            log(f"   >>> UPDATE {d.id} -> pos {sort_order}")
            absorb(await update_bullet(owner_id, d.id, d.content, sort_order))
        except NotFoundError as e:
            if e.resource_id in (None, d.id):
                # Removed elsewhere: the next run creates it again
                log(f"   >>> bullet {d.id} no longer exists, dropping its id")
                d.id = None
            raise
        except Exception as e:
            log(f"   >>> UPDATE FAILED for {d.id}: {type(e).__name__}: {e}")
            raise
        updated.append({'id': d.id, 'local_key': d.local_key, 'content': d.content, 'sort_order': sort_order})
    log(f"   UPDATE phase complete - {len(updated)} updated, {skipped} unchanged")

    log("\n[SUMMARY]")
    log(f"   Deletes: {len(deleted)} | Creates: {len(created)} | Updates: {len(updated)}")

    return {
        'owner_id': owner_id,
        'dry_run': False,
        'counts': {'deletes': len(deleted), 'creates': len(created), 'updates': len(updated)},
        'deletes': deleted,
        'creates': created,
        'updates': updated,
        'skipped': skipped,
        'bullets': sorted(final_bullets, key=lambda b: (b.sort_order, b.id or "")),
    }
