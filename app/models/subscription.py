from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from app.core.ids import gen_id, utcnow
from app.models.base import Base, AuditMixin


class Package(AuditMixin, Base):
    __tablename__ = "packages"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("pkg"))
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=30)

    listing_limit: Mapped[int] = mapped_column(Integer, nullable=False)
    featured_listings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class SellerSubscription(AuditMixin, Base):
    __tablename__ = "seller_subscriptions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("sub"))
    seller_id: Mapped[str] = mapped_column(String, ForeignKey("seller_profiles.id"), nullable=False, index=True)
    package_id: Mapped[str] = mapped_column(String, ForeignKey("packages.id"), nullable=False)

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
