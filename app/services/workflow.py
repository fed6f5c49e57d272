from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import EntitlementDenied, Forbidden, InvalidRequest, NotFound
from app.core.ids import gen_id, utcnow
from app.models.approval_request import ListingApprovalRequest
from app.models.listing import Listing
from app.models.project import Project
from app.models.seller_profile import SellerProfile
from app.services import approvals
from app.services.audit import on_transition
from app.services.entitlements import SubscriptionLookup, can_create_listing, featured_allowed
from app.services.listing_state import (
    DRAFT,
    LIVE,
    NEEDS_REAPPROVAL,
    OUTCOME_APPROVE,
    OUTCOME_REJECT,
    REJECTED,
    STATUS_ACTIVE,
    STATUS_DRAFT,
    SUBMITTED,
    can_submit,
    is_protected,
)
from app.services.notifications import OwnerNotifier
from app.services.pending_changes import (
    ADMIN_EDITABLE_FIELDS,
    EDITABLE_FIELDS,
    apply_fields,
    drop_required_nulls,
    dropped_keys,
    merge_pending,
    null_required_keys,
    sanitize_patch,
)
from app.services.slugs import generate_listing_slug

log = logging.getLogger(__name__)

NEW_PROJECTS_CATEGORY = "new_projects"
REQUIRED_ON_CREATE = ("title", "city", "property_type", "transaction_type")


@dataclass(frozen=True)
class EditResult:
    listing: Listing
    needs_reapproval: bool


async def load_listing(db: AsyncSession, listing_id: str, *, for_update: bool = False) -> Listing:
    stmt = select(Listing).where(Listing.id == listing_id)
    if for_update:
        # row lock serializes transitions on one listing
        stmt = stmt.with_for_update()
    listing = (await db.execute(stmt)).scalar_one_or_none()
    if listing is None:
        raise NotFound("Listing not found")
    return listing


async def _validate_project_reference(db: AsyncSession, category: str | None, project_id: str | None) -> None:
    if category != NEW_PROJECTS_CATEGORY:
        return
    if not project_id:
        raise InvalidRequest("new_projects listings require a project reference")
    project = await db.get(Project, project_id)
    if project is None or not project.is_active:
        raise InvalidRequest(f"Project {project_id} not found or inactive")


def _refresh_slug(listing: Listing, changes: dict[str, tuple[Any, Any]]) -> None:
    if "title" not in changes and "city" not in changes:
        return
    try:
        slug = generate_listing_slug(listing.title, listing.city, listing.id)
    except Exception:
        # slug is cosmetic; keep the old one and let the edit through
        log.warning("slug generation failed for listing %s", listing.id, exc_info=True)
        return
    if slug != listing.slug:
        changes["slug"] = (listing.slug, slug)
        listing.slug = slug


async def create_listing(
    db: AsyncSession,
    *,
    seller_id: str,
    payload: Mapping[str, Any],
    created_by: str,
    subscriptions: SubscriptionLookup | None = None,
    notifier: OwnerNotifier | None = None,
) -> Listing:
    """
    Create a draft listing for a seller.

    Validation and the entitlement check run before anything is added to the
    session, so a denied or invalid request leaves no row behind. A "make
    featured" request beyond the package's featured quota is dropped silently.
    """
    seller = await db.get(SellerProfile, seller_id)
    if seller is None:
        raise Forbidden("Seller profile required. Please complete seller registration.")

    fields = drop_required_nulls(sanitize_patch(payload))
    missing = [name for name in REQUIRED_ON_CREATE if not fields.get(name)]
    if missing:
        raise InvalidRequest(f"Missing required fields: {', '.join(missing)}")
    await _validate_project_reference(db, fields.get("category"), fields.get("project_id"))

    decision = await can_create_listing(db, seller_id, subscriptions=subscriptions)
    if not decision.allowed:
        raise EntitlementDenied(decision.reason or "Listing limit reached")

    make_featured = bool(payload.get("is_featured"))
    if make_featured and not featured_allowed(decision.entitlement):
        log.info("featured quota exhausted for seller %s; creating listing unfeatured", seller_id)
        make_featured = False

    listing = Listing(
        id=gen_id("lst"),
        seller_id=seller_id,
        status=STATUS_DRAFT,
        workflow_status=DRAFT,
        is_featured=make_featured,
        created_by=created_by,
        updated_by=created_by,
        **fields,
    )
    changes = {name: (None, value) for name, value in fields.items()}
    _refresh_slug(listing, changes)

    db.add(listing)
    await db.flush()

    await on_transition(
        db,
        listing_id=listing.id,
        seller_id=seller_id,
        from_state=None,
        to_state=DRAFT,
        actor_id=created_by,
        action="created",
        changes=changes,
        metadata={"is_featured": make_featured, "remaining_listings": decision.remaining},
        notifier=notifier,
    )
    return listing


async def edit_listing(
    db: AsyncSession,
    *,
    listing_id: str,
    caller_id: str,
    is_admin: bool,
    patch: Mapping[str, Any],
    notifier: OwnerNotifier | None = None,
) -> EditResult:
    """
    Apply an edit according to the listing's moderation state.

    - admin: applied directly in any state (admin allow-list).
    - owner, draft/rejected: applied directly.
    - owner, protected state: merged into pending_changes and the listing moves
      to needs_reapproval. Live fields are not touched.

    caller_id is the seller profile id for sellers and the user id for admins.
    """
    listing = await load_listing(db, listing_id, for_update=True)
    if not is_admin and listing.seller_id != caller_id:
        raise Forbidden("You can only edit your own listings")

    allowed = ADMIN_EDITABLE_FIELDS if is_admin else EDITABLE_FIELDS
    sanitized = sanitize_patch(patch, allowed=allowed)
    stripped = dropped_keys(patch, allowed=allowed)
    if stripped:
        log.info("edit on %s: dropped non-editable keys %s", listing.id, stripped)
    nulls = null_required_keys(sanitized)
    if nulls:
        raise InvalidRequest(f"Fields cannot be null: {', '.join(nulls)}")

    if "category" in sanitized or "project_id" in sanitized:
        await _validate_project_reference(
            db,
            sanitized.get("category", listing.category),
            sanitized.get("project_id", listing.project_id),
        )

    from_state = listing.workflow_status

    if not is_admin and is_protected(from_state):
        old_pending = listing.pending_changes
        merged = merge_pending(old_pending, sanitized)
        listing.pending_changes = merged
        listing.workflow_status = NEEDS_REAPPROVAL
        listing.updated_by = caller_id
        await db.flush()

        await on_transition(
            db,
            listing_id=listing.id,
            seller_id=listing.seller_id,
            from_state=from_state,
            to_state=NEEDS_REAPPROVAL,
            actor_id=caller_id,
            action="edit_pending",
            changes={"pending_changes": (old_pending, merged)},
            notifier=notifier,
        )
        return EditResult(listing=listing, needs_reapproval=True)

    changes = apply_fields(listing, sanitized)
    _refresh_slug(listing, changes)
    if changes:
        listing.updated_by = caller_id
        await db.flush()

    await on_transition(
        db,
        listing_id=listing.id,
        seller_id=listing.seller_id,
        from_state=from_state,
        to_state=from_state,
        actor_id=caller_id,
        action="admin_edited" if is_admin else "edited",
        changes=changes,
        notifier=notifier,
    )
    return EditResult(listing=listing, needs_reapproval=False)


async def delete_listing(
    db: AsyncSession,
    *,
    listing_id: str,
    caller_id: str,
    notifier: OwnerNotifier | None = None,
) -> None:
    listing = await load_listing(db, listing_id, for_update=True)
    if listing.seller_id != caller_id:
        raise Forbidden("You can only delete your own listings")

    from_state = listing.workflow_status
    seller_id = listing.seller_id
    title = listing.title

    await db.execute(delete(ListingApprovalRequest).where(ListingApprovalRequest.listing_id == listing.id))
    await db.delete(listing)
    await db.flush()

    await on_transition(
        db,
        listing_id=listing_id,
        seller_id=seller_id,
        from_state=from_state,
        to_state=None,
        actor_id=caller_id,
        action="deleted",
        metadata={"title": title},
        notifier=notifier,
    )


async def submit_for_approval(
    db: AsyncSession,
    *,
    listing_id: str,
    caller_id: str,
    submitted_by: str,
    notifier: OwnerNotifier | None = None,
) -> ListingApprovalRequest:
    """
    Move a listing to `submitted` and open an approval request.
    A previous rejection reason is cleared here, not at the next decision.
    """
    listing = await load_listing(db, listing_id, for_update=True)
    if listing.seller_id != caller_id:
        raise Forbidden("You can only submit your own listings")

    from_state = listing.workflow_status
    if not can_submit(from_state):
        raise InvalidRequest(f"Listing in state {from_state!r} cannot be submitted for approval")

    request = await approvals.submit(db, listing=listing, seller_id=caller_id, submitted_by=submitted_by)

    changes: dict[str, tuple[Any, Any]] = {"workflow_status": (from_state, SUBMITTED)}
    if listing.rejection_reason is not None:
        changes["rejection_reason"] = (listing.rejection_reason, None)
    listing.workflow_status = SUBMITTED
    listing.rejection_reason = None
    listing.updated_by = submitted_by
    await db.flush()

    await on_transition(
        db,
        listing_id=listing.id,
        seller_id=listing.seller_id,
        from_state=from_state,
        to_state=SUBMITTED,
        actor_id=submitted_by,
        action="submitted",
        changes=changes,
        metadata={"approval_request_id": request.id, "request_type": request.request_type},
        notifier=notifier,
    )
    return request


async def decide_approval(
    db: AsyncSession,
    *,
    request_id: str,
    admin_id: str | None,
    outcome: str,
    reason: str | None = None,
    notifier: OwnerNotifier | None = None,
) -> ListingApprovalRequest:
    """
    Resolve an approval request and apply its effect to the listing.

    approve: overlay applied onto the live record, overlay cleared,
             status=active, workflow_status=live, approval stamped.
    reject:  overlay discarded, status=draft, workflow_status=rejected,
             rejection_reason set.

    admin_id is None when the system superadmin decides. Deciding an already
    decided request returns it unchanged.
    """
    if outcome == OUTCOME_REJECT and not (reason and reason.strip()):
        raise InvalidRequest("Rejection reason is required")

    request, decided_now = await approvals.decide(
        db, request_id=request_id, outcome=outcome, admin_id=admin_id, reason=reason
    )
    if not decided_now:
        return request

    listing = await load_listing(db, request.listing_id, for_update=True)
    from_state = listing.workflow_status
    overlay = listing.pending_changes

    if outcome == OUTCOME_APPROVE:
        changes = apply_fields(listing, drop_required_nulls(sanitize_patch(overlay)))
        _refresh_slug(listing, changes)
        now = utcnow()
        changes.update(apply_fields(listing, {
            "workflow_status": LIVE,
            "status": STATUS_ACTIVE,
            "approved_at": now,
            "approved_by": admin_id,
            "pending_changes": None,
        }))
        if listing.published_at is None:
            listing.published_at = now
        to_state = LIVE
    else:
        changes = apply_fields(listing, {
            "workflow_status": REJECTED,
            "status": STATUS_DRAFT,
            "rejection_reason": reason,
            "pending_changes": None,
        })
        to_state = REJECTED

    listing.updated_by = admin_id or "superadmin"
    await db.flush()

    await on_transition(
        db,
        listing_id=listing.id,
        seller_id=listing.seller_id,
        from_state=from_state,
        to_state=to_state,
        actor_id=admin_id,
        action="approved" if outcome == OUTCOME_APPROVE else "rejected",
        changes=changes,
        metadata={
            "approval_request_id": request.id,
            "request_type": request.request_type,
            "reason": reason,
            "overlay_applied": bool(overlay) and outcome == OUTCOME_APPROVE,
        },
        notifier=notifier,
    )
    return request


async def get_approval_history(db: AsyncSession, listing_id: str) -> list[ListingApprovalRequest]:
    await load_listing(db, listing_id)
    return await approvals.history(db, listing_id)
