import asyncio
import logging
import random

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from worker.celery_app import celery
from worker.owner_notify import deliver_owner_notification
from app.core.config import settings
import app.models  # noqa: F401  # ensures Models are registered
from app.services.email_gateway import EmailGateway

log = logging.getLogger(__name__)

MAX_NOTIFY_RETRIES = 5


def retry_countdown(attempt: int, base: int = 15, cap: int = 600) -> int:
    # exponential backoff with jitter
    exp = min(cap, base * (2 ** max(0, attempt)))
    return exp + random.randint(0, min(20, exp // 4))


async def _notify_listing_owner(listing_id: str, seller_id: str, event: str, metadata: dict) -> bool:
    """Returns True when the send should be retried."""
    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    Session = async_sessionmaker(engine, expire_on_commit=False)
    gateway = EmailGateway()

    try:
        async with Session() as db:
            result = await deliver_owner_notification(
                db,
                gateway,
                listing_id=listing_id,
                seller_id=seller_id,
                event=event,
                metadata=metadata,
            )
    finally:
        await gateway.aclose()
        await engine.dispose()

    return bool(result is not None and not result.ok and result.retryable)


@celery.task(name="worker.tasks.notify_listing_owner", bind=True, max_retries=MAX_NOTIFY_RETRIES)
def notify_listing_owner(
    self,
    listing_id: str,
    seller_id: str,
    event: str,
    to_state: str | None = None,
    metadata: dict | None = None,
) -> None:
    should_retry = asyncio.run(_notify_listing_owner(listing_id, seller_id, event, metadata or {}))
    if should_retry:
        if self.request.retries >= MAX_NOTIFY_RETRIES:
            log.error("owner notify gave up: listing=%s event=%s", listing_id, event)
            return
        raise self.retry(countdown=retry_countdown(self.request.retries))
