from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from app.core.ids import gen_id

from app.models.base import Base, AuditMixin, JSONType


class Listing(AuditMixin, Base):
    __tablename__ = "listings"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("lst"))
    seller_id: Mapped[str] = mapped_column(String, ForeignKey("seller_profiles.id"), nullable=False, index=True)
    project_id: Mapped[str | None] = mapped_column(String, ForeignKey("projects.id"), nullable=True)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str | None] = mapped_column(String(300), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # "apartment" | "villa" | "plot" | "commercial" | "farmhouse" | "penthouse"
    property_type: Mapped[str] = mapped_column(String(30), nullable=False)
    # "sale" | "rent" | "lease"
    transaction_type: Mapped[str] = mapped_column(String(30), nullable=False)
    # e.g. "resale", "new_projects", "rental"
    category: Mapped[str | None] = mapped_column(String(60), nullable=True)

    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price_per_sqft: Mapped[int | None] = mapped_column(Integer, nullable=True)
    area: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    balconies: Mapped[int | None] = mapped_column(Integer, nullable=True)
    floor: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_floors: Mapped[int | None] = mapped_column(Integer, nullable=True)
    facing: Mapped[str | None] = mapped_column(String(30), nullable=True)
    furnishing: Mapped[str | None] = mapped_column(String(30), nullable=True)
    age_of_property: Mapped[int | None] = mapped_column(Integer, nullable=True)
    possession_status: Mapped[str | None] = mapped_column(String(60), nullable=True)

    address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    locality: Mapped[str | None] = mapped_column(String(200), nullable=True)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    state: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    pincode: Mapped[str | None] = mapped_column(String(12), nullable=True)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8), nullable=True)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8), nullable=True)

    amenities: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    highlights: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    nearby_places: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    youtube_video_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Coarse visibility: "draft" | "active"
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="draft")
    # Moderation state, see app.services.listing_state
    workflow_status: Mapped[str] = mapped_column(String(30), nullable=False, default="draft", index=True)

    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    inquiry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    favorite_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # admin user id; null when decided by the system superadmin
    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)

    # Shadow overlay of edits awaiting re-approval
    pending_changes: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
