from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.ids import gen_id
from app.models.base import Base, AuditMixin


class SellerProfile(AuditMixin, Base):
    __tablename__ = "seller_profiles"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("slr"))
    user_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)

    # "individual" | "broker" | "builder"
    seller_type: Mapped[str] = mapped_column(String(30), nullable=False, default="individual")
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
