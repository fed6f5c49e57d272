from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.entitlement import EntitlementOut
from app.services.auth import Actor, require_seller
from app.services.entitlements import SubscriptionLookup, can_create_listing, get_subscription_lookup

router = APIRouter()


@router.get("/sellers/me/entitlements", response_model=EntitlementOut)
async def my_entitlements(
    actor: Actor = Depends(require_seller),
    subscriptions: SubscriptionLookup = Depends(get_subscription_lookup),
    db: AsyncSession = Depends(get_db),
) -> EntitlementOut:
    decision = await can_create_listing(db, actor.seller_id, subscriptions=subscriptions)
    ent = decision.entitlement
    return EntitlementOut(
        allowed=decision.allowed,
        reason=decision.reason,
        remaining=decision.remaining,
        listing_limit=ent.listing_limit if ent else None,
        featured_limit=ent.featured_limit if ent else None,
        featured_used=ent.featured_used if ent else None,
    )
