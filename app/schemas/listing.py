from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.services.pending_changes import NON_NULLABLE_FIELDS

PropertyType = Literal["apartment", "villa", "plot", "commercial", "farmhouse", "penthouse"]
TransactionType = Literal["sale", "rent", "lease"]


class NearbyPlace(BaseModel):
    type: str
    name: str
    distance: str


class ListingFields(BaseModel):
    # Unknown keys (including system fields) are ignored at the boundary.
    model_config = ConfigDict(extra="ignore")

    description: str | None = None
    category: str | None = Field(default=None, max_length=60)
    project_id: str | None = None

    price_per_sqft: int | None = Field(default=None, ge=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    balconies: int | None = Field(default=None, ge=0)
    floor: int | None = None
    total_floors: int | None = Field(default=None, ge=0)
    facing: str | None = Field(default=None, max_length=30)
    furnishing: str | None = Field(default=None, max_length=30)
    age_of_property: int | None = Field(default=None, ge=0)
    possession_status: str | None = Field(default=None, max_length=60)

    locality: str | None = Field(default=None, max_length=200)
    pincode: str | None = Field(default=None, max_length=12)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    amenities: list[str] | None = None
    highlights: list[str] | None = None
    nearby_places: list[NearbyPlace] | None = None
    youtube_video_url: str | None = None


class ListingCreate(ListingFields):
    title: str = Field(min_length=1)
    property_type: PropertyType
    transaction_type: TransactionType
    price: int = Field(default=0, ge=0)
    area: int = Field(default=0, ge=0)
    address: str = ""
    city: str = Field(min_length=1, max_length=120)
    state: str = Field(default="", max_length=120)

    # honoured only while the package's featured quota lasts
    is_featured: bool = False


class ListingPatch(ListingFields):
    title: str | None = Field(default=None, min_length=1)
    property_type: PropertyType | None = None
    transaction_type: TransactionType | None = None
    price: int | None = Field(default=None, ge=0)
    area: int | None = Field(default=None, ge=0)
    address: str | None = None
    city: str | None = Field(default=None, min_length=1, max_length=120)
    state: str | None = Field(default=None, max_length=120)

    # admin-only; stripped from seller edits
    is_verified: bool | None = None
    is_featured: bool | None = None
    expires_at: datetime | None = None

    # Omitting a field leaves it alone; an explicit null would clear a NOT NULL column.
    @field_validator(*sorted(NON_NULLABLE_FIELDS), mode="before")
    @classmethod
    def _reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class ListingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    seller_id: str
    project_id: str | None
    title: str
    slug: str | None
    description: str | None
    property_type: str
    transaction_type: str
    category: str | None
    price: int
    price_per_sqft: int | None
    area: int
    bedrooms: int | None
    bathrooms: int | None
    balconies: int | None
    floor: int | None
    total_floors: int | None
    facing: str | None
    furnishing: str | None
    age_of_property: int | None
    possession_status: str | None
    address: str
    locality: str | None
    city: str
    state: str
    pincode: str | None
    latitude: float | None
    longitude: float | None
    amenities: list | None
    highlights: list | None
    nearby_places: list | None
    youtube_video_url: str | None

    status: str
    workflow_status: str
    is_verified: bool
    is_featured: bool
    published_at: datetime | None
    expires_at: datetime | None
    approved_at: datetime | None
    approved_by: str | None
    pending_changes: dict | None
    rejection_reason: str | None


class ListingEditOut(BaseModel):
    listing: ListingOut
    needs_reapproval: bool
    message: str
