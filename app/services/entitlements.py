from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.ids import utcnow
from app.models.listing import Listing
from app.models.subscription import Package, SellerSubscription
from app.services.listing_state import PUBLISHED_STATES, STATUS_ACTIVE

log = logging.getLogger(__name__)

NO_SUBSCRIPTION_REASON = "seller profile/subscription required"
LIMIT_REACHED_REASON = "Listing limit reached. Please upgrade your package to create more listings."


@dataclass(frozen=True)
class SubscriptionEntitlement:
    listing_limit: int
    featured_limit: int
    featured_used: int


@dataclass(frozen=True)
class EntitlementDecision:
    allowed: bool
    reason: str | None = None
    remaining: int | None = None
    entitlement: SubscriptionEntitlement | None = None


class SubscriptionLookup(Protocol):
    async def lookup(self, db: AsyncSession, seller_id: str) -> SubscriptionEntitlement | None:
        ...


async def active_listing_count(db: AsyncSession, seller_id: str) -> int:
    # Derived from listing rows, never stored, so it cannot drift.
    stmt = select(func.count()).select_from(Listing).where(
        Listing.seller_id == seller_id,
        Listing.status == STATUS_ACTIVE,
        Listing.workflow_status.in_(sorted(PUBLISHED_STATES)),
    )
    return int((await db.execute(stmt)).scalar_one())


async def featured_listing_count(db: AsyncSession, seller_id: str) -> int:
    stmt = select(func.count()).select_from(Listing).where(
        Listing.seller_id == seller_id,
        Listing.is_featured.is_(True),
    )
    return int((await db.execute(stmt)).scalar_one())


class SqlSubscriptionLookup:
    """Reads the seller's current subscription + package. Read-only."""

    async def lookup(self, db: AsyncSession, seller_id: str) -> SubscriptionEntitlement | None:
        stmt = (
            select(SellerSubscription, Package)
            .join(Package, Package.id == SellerSubscription.package_id)
            .where(
                SellerSubscription.seller_id == seller_id,
                SellerSubscription.is_active.is_(True),
                SellerSubscription.end_date > utcnow(),
            )
            .order_by(SellerSubscription.end_date.desc())
            .limit(1)
        )
        row = (await db.execute(stmt)).first()
        if row is None:
            return None

        _, package = row
        return SubscriptionEntitlement(
            listing_limit=package.listing_limit,
            featured_limit=package.featured_listings,
            featured_used=await featured_listing_count(db, seller_id),
        )


async def can_create_listing(
    db: AsyncSession,
    seller_id: str,
    *,
    subscriptions: SubscriptionLookup | None = None,
) -> EntitlementDecision:
    subscriptions = subscriptions or SqlSubscriptionLookup()

    entitlement = await subscriptions.lookup(db, seller_id)
    if entitlement is None:
        return EntitlementDecision(allowed=False, reason=NO_SUBSCRIPTION_REASON)

    used = await active_listing_count(db, seller_id)
    remaining = entitlement.listing_limit - used
    if remaining <= 0:
        log.info("entitlement denied: seller=%s used=%d limit=%d", seller_id, used, entitlement.listing_limit)
        return EntitlementDecision(
            allowed=False,
            reason=LIMIT_REACHED_REASON,
            remaining=0,
            entitlement=entitlement,
        )

    return EntitlementDecision(allowed=True, remaining=remaining, entitlement=entitlement)


def featured_allowed(entitlement: SubscriptionEntitlement | None) -> bool:
    if entitlement is None:
        return False
    return entitlement.featured_used < entitlement.featured_limit


def get_subscription_lookup() -> SubscriptionLookup:
    return SqlSubscriptionLookup()
