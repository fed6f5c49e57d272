from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from app.core.config import settings
from app.services.listing_state import NEEDS_REAPPROVAL, LIVE, REJECTED, SUBMITTED
from worker.celery_app import celery

log = logging.getLogger(__name__)

NOTIFY_TASK = "worker.tasks.notify_listing_owner"

# Email trigger per target state. States not listed send nothing.
EMAIL_EVENT_BY_STATE = {
    SUBMITTED: "property_submitted",
    LIVE: "property_approved",
    REJECTED: "property_rejected",
    NEEDS_REAPPROVAL: "property_needs_reapproval",
}


@dataclass(frozen=True)
class OwnerNotice:
    listing_id: str
    seller_id: str
    event: str
    to_state: str | None
    metadata: dict[str, Any] = field(default_factory=dict)

    def as_task_kwargs(self) -> dict[str, Any]:
        return {
            "listing_id": self.listing_id,
            "seller_id": self.seller_id,
            "event": self.event,
            "to_state": self.to_state,
            "metadata": self.metadata,
        }


class OwnerNotifier(Protocol):
    def notify_owner(self, notice: OwnerNotice) -> None:
        ...


class CeleryOwnerNotifier:
    """Hands the notice to the worker; delivery happens out of band."""

    def __init__(self, *, queue: str | None = None):
        self.queue = queue or settings.notification_queue

    def notify_owner(self, notice: OwnerNotice) -> None:
        celery.send_task(NOTIFY_TASK, kwargs=notice.as_task_kwargs(), queue=self.queue)


class NullOwnerNotifier:
    def notify_owner(self, notice: OwnerNotice) -> None:
        log.debug("notifications disabled; dropping %s for listing %s", notice.event, notice.listing_id)


def notice_for_transition(
    *,
    listing_id: str,
    seller_id: str,
    to_state: str | None,
    metadata: dict[str, Any] | None = None,
) -> OwnerNotice | None:
    event = EMAIL_EVENT_BY_STATE.get(to_state or "")
    if event is None:
        return None
    return OwnerNotice(
        listing_id=listing_id,
        seller_id=seller_id,
        event=event,
        to_state=to_state,
        metadata=dict(metadata or {}),
    )


def get_notifier() -> OwnerNotifier:
    if not settings.notifications_enabled:
        return NullOwnerNotifier()
    return CeleryOwnerNotifier()
