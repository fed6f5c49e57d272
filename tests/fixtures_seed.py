from datetime import timedelta

import pytest
import pytest_asyncio

from app.core.ids import gen_id, utcnow
from app.core.security import generate_api_key
from app.models.api_key import ApiKey
from app.models.seller_profile import SellerProfile
from app.models.subscription import Package, SellerSubscription


class RecordingNotifier:
    def __init__(self):
        self.notices = []

    def notify_owner(self, notice) -> None:
        self.notices.append(notice)

    @property
    def events(self) -> list[str]:
        return [n.event for n in self.notices]


def listing_payload(**overrides) -> dict:
    payload = {
        "title": "2BR Apartment near Koregaon Park",
        "property_type": "apartment",
        "transaction_type": "sale",
        "price": 8_500_000,
        "area": 1150,
        "bedrooms": 2,
        "address": "Lane 5, Koregaon Park",
        "city": "Pune",
        "state": "Maharashtra",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_seller(db_session):
    """
    Factory: seller profile + API key, optionally with an active subscription.
    """
    async def _make(
        *,
        listing_limit: int | None = 1,
        featured_listings: int = 0,
        expired: bool = False,
        email: str | None = "seller@test.com",
    ) -> dict:
        user_id = gen_id("usr")
        seller = SellerProfile(
            user_id=user_id,
            seller_type="broker",
            display_name="Seller Test",
            email=email,
            created_by="test",
            updated_by="test",
        )
        db_session.add(seller)
        await db_session.flush()

        if listing_limit is not None:
            package = Package(
                name="Starter",
                price=999,
                duration_days=30,
                listing_limit=listing_limit,
                featured_listings=featured_listings,
                created_by="test",
                updated_by="test",
            )
            db_session.add(package)
            await db_session.flush()

            now = utcnow()
            end = now - timedelta(days=1) if expired else now + timedelta(days=30)
            db_session.add(SellerSubscription(
                seller_id=seller.id,
                package_id=package.id,
                start_date=now - timedelta(days=31 if expired else 0),
                end_date=end,
                is_active=True,
                created_by="test",
                updated_by="test",
            ))

        key = generate_api_key()
        key_row = ApiKey(
            role="seller",
            user_id=user_id,
            seller_id=seller.id,
            key_prefix=key.prefix,
            key_hash=key.hashed,
            is_active=True,
        )
        db_session.add(key_row)
        await db_session.flush()

        return {
            "seller_id": seller.id,
            "user_id": user_id,
            "api_key": key.plain,
            "headers": {"X-API-Key": key.plain},
        }

    return _make


@pytest_asyncio.fixture
async def seller(make_seller) -> dict:
    return await make_seller(listing_limit=1)


@pytest_asyncio.fixture
async def admin(db_session) -> dict:
    user_id = gen_id("adm")
    key = generate_api_key()
    key_row = ApiKey(
        role="admin",
        user_id=user_id,
        seller_id=None,
        key_prefix=key.prefix,
        key_hash=key.hashed,
        is_active=True,
    )
    db_session.add(key_row)
    await db_session.flush()
    return {"user_id": user_id, "api_key": key.plain, "headers": {"X-API-Key": key.plain}}
