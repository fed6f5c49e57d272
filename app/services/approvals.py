from __future__ import annotations

import logging

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Conflict, InvalidRequest, NotFound
from app.core.ids import utcnow
from app.models.approval_request import ListingApprovalRequest
from app.models.listing import Listing
from app.services.listing_state import (
    OUTCOME_APPROVE,
    OUTCOME_REJECT,
    REQUEST_APPROVED,
    REQUEST_EDIT,
    REQUEST_NEW,
    REQUEST_PENDING,
    REQUEST_REJECTED,
    is_terminal_request,
)

log = logging.getLogger(__name__)


async def submit(
    db: AsyncSession,
    *,
    listing: Listing,
    seller_id: str,
    submitted_by: str,
) -> ListingApprovalRequest:
    """
    Record a submission-for-review. The request type is derived from the overlay:
    a listing carrying an overlay (even an empty one) is an "edit" review, otherwise "new".
    """
    if listing.seller_id != seller_id:
        raise Conflict("Only the owning seller can submit this listing")

    pending = listing.pending_changes
    request = ListingApprovalRequest(
        listing_id=listing.id,
        seller_id=seller_id,
        submitted_by=submitted_by,
        request_type=REQUEST_EDIT if pending is not None else REQUEST_NEW,
        status=REQUEST_PENDING,
        changes_snapshot=dict(pending) if pending is not None else None,
    )
    db.add(request)
    await db.flush()
    return request


async def get_request(db: AsyncSession, request_id: str, *, for_update: bool = False) -> ListingApprovalRequest:
    stmt = select(ListingApprovalRequest).where(ListingApprovalRequest.id == request_id)
    if for_update:
        stmt = stmt.with_for_update()
    request = (await db.execute(stmt)).scalar_one_or_none()
    if request is None:
        raise NotFound("Approval request not found")
    return request


async def decide(
    db: AsyncSession,
    *,
    request_id: str,
    outcome: str,
    admin_id: str | None,
    reason: str | None = None,
) -> tuple[ListingApprovalRequest, bool]:
    """
    Resolve a pending request. Returns (request, decided_now).

    A request that is already approved/rejected is left untouched and
    decided_now is False, so a repeated decision has no effects.
    """
    if outcome not in (OUTCOME_APPROVE, OUTCOME_REJECT):
        raise InvalidRequest(f"Unknown outcome {outcome!r}")

    request = await get_request(db, request_id, for_update=True)
    if is_terminal_request(request.status):
        log.info("approval %s already %s; ignoring %s", request.id, request.status, outcome)
        return request, False

    request.status = REQUEST_APPROVED if outcome == OUTCOME_APPROVE else REQUEST_REJECTED
    request.approver_id = admin_id
    request.decision_reason = reason
    request.decided_at = utcnow()
    await db.flush()
    return request, True


async def history(db: AsyncSession, listing_id: str) -> list[ListingApprovalRequest]:
    stmt = (
        select(ListingApprovalRequest)
        .where(ListingApprovalRequest.listing_id == listing_id)
        .order_by(desc(ListingApprovalRequest.submitted_at), desc(ListingApprovalRequest.id))
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_requests(
    db: AsyncSession,
    *,
    status: str | None = None,
    request_type: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[ListingApprovalRequest]:
    # Admin moderation queue, oldest first so reviews go in submission order.
    stmt = select(ListingApprovalRequest)
    if status:
        stmt = stmt.where(ListingApprovalRequest.status == status)
    if request_type:
        stmt = stmt.where(ListingApprovalRequest.request_type == request_type)
    stmt = stmt.order_by(ListingApprovalRequest.submitted_at.asc()).limit(limit).offset(offset)
    return list((await db.execute(stmt)).scalars().all())
