from datetime import datetime

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from app.core.ids import gen_id, utcnow
from app.models.base import Base, JSONType


class ListingApprovalRequest(Base):
    __tablename__ = "listing_approval_requests"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("apr"))

    listing_id: Mapped[str] = mapped_column(
        String, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    seller_id: Mapped[str] = mapped_column(String, ForeignKey("seller_profiles.id"), nullable=False)
    submitted_by: Mapped[str] = mapped_column(String, nullable=False)

    # "new" | "edit"
    request_type: Mapped[str] = mapped_column(String(20), nullable=False, default="new")
    # "pending" | "approved" | "rejected"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)

    decision_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    approver_id: Mapped[str | None] = mapped_column(String, nullable=True)

    # overlay as it stood when the seller submitted
    changes_snapshot: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
