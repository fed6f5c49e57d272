from __future__ import annotations

import logging
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog
from app.services.notifications import OwnerNotifier, notice_for_transition

log = logging.getLogger(__name__)

# session.info key holding (notifier, notice) pairs until the unit of work commits
_PENDING_NOTICES = "pending_owner_notices"


async def audit(
    db: AsyncSession,
    *,
    actor_id: str | None,
    action: str,
    target_type: str | None = None,
    target_id: str | None = None,
    detail: dict | None = None,
) -> None:
    db.add(AuditLog(
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        detail=jsonable_encoder(detail or {}),
    ))


async def on_transition(
    db: AsyncSession,
    *,
    listing_id: str,
    seller_id: str,
    from_state: str | None,
    to_state: str | None,
    actor_id: str | None,
    action: str,
    changes: dict[str, tuple[Any, Any]] | None = None,
    metadata: dict[str, Any] | None = None,
    notifier: OwnerNotifier | None = None,
) -> None:
    """
    Transition hook.

    1. Appends an audit row with old/new values of the mutated fields. The row
       belongs to the same unit of work as the transition.
    2. Queues an owner notification that is handed to the notifier only after
       the session commits. A failing notifier is logged and ignored.
    """
    changes = changes or {}
    detail: dict[str, Any] = {
        "from": from_state,
        "to": to_state,
        "old": {k: old for k, (old, _) in changes.items()},
        "new": {k: new for k, (_, new) in changes.items()},
    }
    if metadata:
        detail["metadata"] = metadata

    await audit(
        db,
        actor_id=actor_id,
        action=f"listing.{action}",
        target_type="listing",
        target_id=listing_id,
        detail=detail,
    )

    if notifier is None:
        return
    notice = notice_for_transition(
        listing_id=listing_id,
        seller_id=seller_id,
        to_state=to_state,
        metadata=metadata,
    )
    if notice is not None:
        db.info.setdefault(_PENDING_NOTICES, []).append((notifier, notice))


@event.listens_for(Session, "after_commit")
def _dispatch_owner_notices(session: Session) -> None:
    queued = session.info.pop(_PENDING_NOTICES, None) or []
    for notifier, notice in queued:
        try:
            notifier.notify_owner(notice)
        except Exception:
            log.exception("owner notification dropped: listing=%s event=%s", notice.listing_id, notice.event)


@event.listens_for(Session, "after_rollback")
def _discard_owner_notices(session: Session) -> None:
    dropped = session.info.pop(_PENDING_NOTICES, None)
    if dropped:
        log.info("rollback: discarded %d owner notification(s)", len(dropped))
