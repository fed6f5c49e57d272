from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ApprovalRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    listing_id: str
    seller_id: str
    submitted_by: str
    request_type: Literal["new", "edit"]
    status: Literal["pending", "approved", "rejected"]
    decision_reason: str | None
    approver_id: str | None
    changes_snapshot: dict | None
    submitted_at: datetime
    decided_at: datetime | None


class ApproveIn(BaseModel):
    notes: str | None = None


class RejectIn(BaseModel):
    reason: str = Field(min_length=1, max_length=2000)
