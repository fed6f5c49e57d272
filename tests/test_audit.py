import pytest
from sqlalchemy import select

from app.models.audit_log import AuditLog
from app.services import workflow
from app.services.listing_state import OUTCOME_APPROVE, OUTCOME_REJECT
from app.services.notifications import (
    CeleryOwnerNotifier,
    NullOwnerNotifier,
    OwnerNotice,
    get_notifier,
    notice_for_transition,
)

from fixtures_seed import listing_payload


async def _audit_rows(db, listing_id):
    stmt = select(AuditLog).where(AuditLog.target_id == listing_id).order_by(AuditLog.created_at, AuditLog.id)
    return list((await db.execute(stmt)).scalars().all())


async def _create(db, seller, notifier=None):
    return await workflow.create_listing(
        db,
        seller_id=seller["seller_id"],
        payload=listing_payload(),
        created_by=seller["user_id"],
        notifier=notifier,
    )


@pytest.mark.asyncio
async def test_every_transition_writes_an_audit_row(db_session, seller):
    listing = await _create(db_session, seller)
    request = await workflow.submit_for_approval(
        db_session, listing_id=listing.id, caller_id=seller["seller_id"], submitted_by=seller["user_id"]
    )
    await workflow.decide_approval(db_session, request_id=request.id, admin_id="adm_1", outcome=OUTCOME_APPROVE)
    await workflow.edit_listing(
        db_session, listing_id=listing.id, caller_id=seller["seller_id"], is_admin=False, patch={"price": 1}
    )

    rows = await _audit_rows(db_session, listing.id)
    actions = sorted(r.action for r in rows)
    assert actions == sorted([
        "listing.created", "listing.submitted", "listing.approved", "listing.edit_pending",
    ])

    approved = next(r for r in rows if r.action == "listing.approved")
    assert approved.actor_id == "adm_1"
    assert approved.target_type == "listing"
    assert approved.detail["from"] == "submitted"
    assert approved.detail["to"] == "live"
    assert approved.detail["old"]["workflow_status"] == "submitted"
    assert approved.detail["new"]["status"] == "active"
    assert approved.detail["metadata"]["approval_request_id"] == request.id

    pending = next(r for r in rows if r.action == "listing.edit_pending")
    assert pending.detail["old"]["pending_changes"] is None
    assert pending.detail["new"]["pending_changes"] == {"price": 1}


@pytest.mark.asyncio
async def test_rejection_audit_records_reason(db_session, seller):
    listing = await _create(db_session, seller)
    request = await workflow.submit_for_approval(
        db_session, listing_id=listing.id, caller_id=seller["seller_id"], submitted_by=seller["user_id"]
    )
    await workflow.decide_approval(
        db_session, request_id=request.id, admin_id=None, outcome=OUTCOME_REJECT, reason="no photos"
    )

    rows = await _audit_rows(db_session, listing.id)
    rejected = next(r for r in rows if r.action == "listing.rejected")
    assert rejected.actor_id is None
    assert rejected.detail["new"]["rejection_reason"] == "no photos"
    assert rejected.detail["metadata"]["reason"] == "no photos"


@pytest.mark.asyncio
async def test_notifications_dispatch_only_after_commit(db_session, seller, notifier):
    listing = await _create(db_session, seller, notifier)
    await workflow.submit_for_approval(
        db_session,
        listing_id=listing.id,
        caller_id=seller["seller_id"],
        submitted_by=seller["user_id"],
        notifier=notifier,
    )
    assert notifier.events == []

    await db_session.commit()

    # draft creation has no email; submission does
    assert notifier.events == ["property_submitted"]
    notice = notifier.notices[0]
    assert notice.listing_id == listing.id
    assert notice.seller_id == seller["seller_id"]
    assert notice.to_state == "submitted"


@pytest.mark.asyncio
async def test_rollback_discards_queued_notifications(db_session, seller, notifier):
    listing = await _create(db_session, seller)
    await db_session.commit()

    await workflow.submit_for_approval(
        db_session,
        listing_id=listing.id,
        caller_id=seller["seller_id"],
        submitted_by=seller["user_id"],
        notifier=notifier,
    )
    await db_session.rollback()
    await db_session.commit()

    assert notifier.events == []


class _ExplodingNotifier:
    def notify_owner(self, notice):
        raise RuntimeError("broker down")


@pytest.mark.asyncio
async def test_failing_notifier_does_not_undo_transition(db_session, seller):
    listing = await _create(db_session, seller)
    await workflow.submit_for_approval(
        db_session,
        listing_id=listing.id,
        caller_id=seller["seller_id"],
        submitted_by=seller["user_id"],
        notifier=_ExplodingNotifier(),
    )
    await db_session.commit()

    reloaded = await workflow.load_listing(db_session, listing.id)
    assert reloaded.workflow_status == "submitted"
    rows = await _audit_rows(db_session, listing.id)
    assert "listing.submitted" in {r.action for r in rows}


@pytest.mark.asyncio
async def test_full_cycle_emails(db_session, seller, notifier):
    listing = await _create(db_session, seller, notifier)
    request = await workflow.submit_for_approval(
        db_session, listing_id=listing.id, caller_id=seller["seller_id"],
        submitted_by=seller["user_id"], notifier=notifier,
    )
    await workflow.decide_approval(
        db_session, request_id=request.id, admin_id="adm_1", outcome=OUTCOME_APPROVE, notifier=notifier
    )
    await workflow.edit_listing(
        db_session, listing_id=listing.id, caller_id=seller["seller_id"], is_admin=False,
        patch={"title": "New title"}, notifier=notifier,
    )
    request = await workflow.submit_for_approval(
        db_session, listing_id=listing.id, caller_id=seller["seller_id"],
        submitted_by=seller["user_id"], notifier=notifier,
    )
    await workflow.decide_approval(
        db_session, request_id=request.id, admin_id="adm_1", outcome=OUTCOME_REJECT,
        reason="title misleading", notifier=notifier,
    )
    await db_session.commit()

    assert notifier.events == [
        "property_submitted",
        "property_approved",
        "property_needs_reapproval",
        "property_submitted",
        "property_rejected",
    ]
    assert notifier.notices[-1].metadata["reason"] == "title misleading"


def test_notice_for_transition_skips_silent_states():
    assert notice_for_transition(listing_id="lst_1", seller_id="slr_1", to_state="draft") is None
    assert notice_for_transition(listing_id="lst_1", seller_id="slr_1", to_state=None) is None

    notice = notice_for_transition(listing_id="lst_1", seller_id="slr_1", to_state="live", metadata={"a": 1})
    assert notice.event == "property_approved"
    assert notice.as_task_kwargs() == {
        "listing_id": "lst_1",
        "seller_id": "slr_1",
        "event": "property_approved",
        "to_state": "live",
        "metadata": {"a": 1},
    }


def test_get_notifier_honours_setting(monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "notifications_enabled", False)
    assert isinstance(get_notifier(), NullOwnerNotifier)

    monkeypatch.setattr(settings, "notifications_enabled", True)
    assert isinstance(get_notifier(), CeleryOwnerNotifier)


def test_celery_notifier_sends_task(monkeypatch):
    sent = []

    def _send_task(name, kwargs=None, queue=None):
        sent.append((name, kwargs, queue))

    from worker.celery_app import celery

    monkeypatch.setattr(celery, "send_task", _send_task)
    CeleryOwnerNotifier(queue="notifications").notify_owner(
        OwnerNotice(listing_id="lst_1", seller_id="slr_1", event="property_submitted", to_state="submitted")
    )

    assert sent == [(
        "worker.tasks.notify_listing_owner",
        {
            "listing_id": "lst_1",
            "seller_id": "slr_1",
            "event": "property_submitted",
            "to_state": "submitted",
            "metadata": {},
        },
        "notifications",
    )]
