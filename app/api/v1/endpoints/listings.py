from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.approval import ApprovalRequestOut
from app.schemas.common import StatusResponse
from app.schemas.listing import ListingCreate, ListingEditOut, ListingOut, ListingPatch
from app.services import workflow
from app.services.auth import Actor, get_actor, require_seller
from app.services.entitlements import SubscriptionLookup, get_subscription_lookup
from app.services.listing_state import LIVE
from app.services.notifications import OwnerNotifier, get_notifier

router = APIRouter()

PENDING_MESSAGE = (
    "Changes saved as pending. Please resubmit for admin approval. "
    "Your live listing remains unchanged until approved."
)


def _caller_id(actor: Actor) -> str:
    # sellers act through their seller profile, admins as themselves
    if actor.is_admin:
        return actor.user_id
    if not actor.seller_id:
        raise HTTPException(status_code=403, detail="Seller profile required")
    return actor.seller_id


@router.post("/listings", response_model=ListingOut, status_code=201)
async def create_listing(
    payload: ListingCreate,
    actor: Actor = Depends(require_seller),
    subscriptions: SubscriptionLookup = Depends(get_subscription_lookup),
    notifier: OwnerNotifier = Depends(get_notifier),
    db: AsyncSession = Depends(get_db),
) -> ListingOut:
    listing = await workflow.create_listing(
        db,
        seller_id=actor.seller_id,
        payload=payload.model_dump(),
        created_by=actor.user_id,
        subscriptions=subscriptions,
        notifier=notifier,
    )
    await db.commit()
    return ListingOut.model_validate(listing)


@router.get("/listings/{listing_id}", response_model=ListingOut)
async def get_listing(
    listing_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ListingOut:
    listing = await workflow.load_listing(db, listing_id)
    if not actor.is_admin and listing.seller_id != actor.seller_id and listing.workflow_status != LIVE:
        raise HTTPException(status_code=404, detail="Listing not found")
    return ListingOut.model_validate(listing)


@router.patch("/listings/{listing_id}", response_model=ListingEditOut)
async def edit_listing(
    listing_id: str,
    patch: ListingPatch,
    actor: Actor = Depends(get_actor),
    notifier: OwnerNotifier = Depends(get_notifier),
    db: AsyncSession = Depends(get_db),
) -> ListingEditOut:
    result = await workflow.edit_listing(
        db,
        listing_id=listing_id,
        caller_id=_caller_id(actor),
        is_admin=actor.is_admin,
        patch=patch.model_dump(exclude_unset=True),
        notifier=notifier,
    )
    await db.commit()
    return ListingEditOut(
        listing=ListingOut.model_validate(result.listing),
        needs_reapproval=result.needs_reapproval,
        message=PENDING_MESSAGE if result.needs_reapproval else "Listing updated",
    )


@router.delete("/listings/{listing_id}", response_model=StatusResponse)
async def delete_listing(
    listing_id: str,
    actor: Actor = Depends(require_seller),
    notifier: OwnerNotifier = Depends(get_notifier),
    db: AsyncSession = Depends(get_db),
) -> StatusResponse:
    await workflow.delete_listing(db, listing_id=listing_id, caller_id=actor.seller_id, notifier=notifier)
    await db.commit()
    return StatusResponse(status="deleted")


@router.post("/listings/{listing_id}/submit", response_model=ApprovalRequestOut)
async def submit_for_approval(
    listing_id: str,
    actor: Actor = Depends(require_seller),
    notifier: OwnerNotifier = Depends(get_notifier),
    db: AsyncSession = Depends(get_db),
) -> ApprovalRequestOut:
    request = await workflow.submit_for_approval(
        db,
        listing_id=listing_id,
        caller_id=actor.seller_id,
        submitted_by=actor.user_id,
        notifier=notifier,
    )
    await db.commit()
    return ApprovalRequestOut.model_validate(request)


@router.get("/listings/{listing_id}/approval-history", response_model=list[ApprovalRequestOut])
async def approval_history(
    listing_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> list[ApprovalRequestOut]:
    listing = await workflow.load_listing(db, listing_id)
    if not actor.is_admin and listing.seller_id != actor.seller_id:
        raise HTTPException(status_code=403, detail="You can only view history of your own listings")
    rows = await workflow.get_approval_history(db, listing_id)
    return [ApprovalRequestOut.model_validate(r) for r in rows]
