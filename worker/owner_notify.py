from __future__ import annotations

import html
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.listing import Listing
from app.models.seller_profile import SellerProfile
from app.services.email_gateway import EmailGateway, SendResult

log = logging.getLogger(__name__)

SUBJECTS = {
    "property_submitted": "Your listing \"{title}\" was submitted for review",
    "property_approved": "Your listing \"{title}\" is now live",
    "property_rejected": "Your listing \"{title}\" was not approved",
    "property_needs_reapproval": "Changes to \"{title}\" are waiting for resubmission",
}

BODIES = {
    "property_submitted": "<p>Hi {seller},</p><p>We received <strong>{title}</strong> for review. "
                          "You will hear from us once a moderator has looked at it.</p>",
    "property_approved": "<p>Hi {seller},</p><p><strong>{title}</strong> has been approved and is now visible to buyers.</p>",
    "property_rejected": "<p>Hi {seller},</p><p><strong>{title}</strong> was not approved.</p>"
                         "<p><strong>Reason:</strong> {reason}</p><p>Update the listing and submit it again.</p>",
    "property_needs_reapproval": "<p>Hi {seller},</p><p>Your edits to <strong>{title}</strong> were saved as pending. "
                                 "The live listing stays unchanged until you resubmit and a moderator approves.</p>",
}


def render_owner_email(event: str, *, seller_name: str, title: str, metadata: dict[str, Any]) -> tuple[str, str]:
    if event not in SUBJECTS:
        raise KeyError(f"no email template for {event}")
    subject = SUBJECTS[event].format(title=title)
    body = BODIES[event].format(
        seller=html.escape(seller_name),
        title=html.escape(title),
        reason=html.escape(str(metadata.get("reason") or "")),
    )
    return subject, body


async def deliver_owner_notification(
    db: AsyncSession,
    gateway: EmailGateway,
    *,
    listing_id: str,
    seller_id: str,
    event: str,
    metadata: dict[str, Any] | None = None,
) -> SendResult | None:
    """
    Send the owner email for one workflow event.
    Returns None when there is nothing to send (listing gone, no email on file).
    """
    seller = await db.get(SellerProfile, seller_id)
    if seller is None or not seller.email:
        log.info("owner notify skipped: seller %s has no email", seller_id)
        return None

    listing = await db.get(Listing, listing_id)
    if listing is None:
        log.info("owner notify skipped: listing %s no longer exists", listing_id)
        return None

    metadata = dict(metadata or {})
    if event == "property_rejected" and not metadata.get("reason"):
        metadata["reason"] = listing.rejection_reason

    subject, body = render_owner_email(event, seller_name=seller.display_name, title=listing.title, metadata=metadata)
    result = await gateway.send(
        to=seller.email,
        subject=subject,
        html=body,
        tags={"event": event, "listing_id": listing_id},
        request_id=f"{listing_id}:{event}",
    )
    if result.ok:
        log.info("owner notify sent: listing=%s event=%s", listing_id, event)
    else:
        log.warning(
            "owner notify failed: listing=%s event=%s code=%s retryable=%s",
            listing_id, event, result.error_code, result.retryable,
        )
    return result
