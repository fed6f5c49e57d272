from pydantic import BaseModel


class EntitlementOut(BaseModel):
    allowed: bool
    reason: str | None
    remaining: int | None
    listing_limit: int | None
    featured_limit: int | None
    featured_used: int | None
