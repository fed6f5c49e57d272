from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.approval import ApprovalRequestOut, ApproveIn, RejectIn
from app.services import approvals, workflow
from app.services.auth import Actor, require_admin
from app.services.listing_state import OUTCOME_APPROVE, OUTCOME_REJECT
from app.services.notifications import OwnerNotifier, get_notifier

router = APIRouter(prefix="/admin")


@router.get("/approvals", response_model=list[ApprovalRequestOut])
async def list_approvals(
    status: Literal["pending", "approved", "rejected"] | None = Query(default="pending"),
    request_type: Literal["new", "edit"] | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[ApprovalRequestOut]:
    rows = await approvals.list_requests(db, status=status, request_type=request_type, limit=limit, offset=offset)
    return [ApprovalRequestOut.model_validate(r) for r in rows]


@router.post("/approvals/{request_id}/approve", response_model=ApprovalRequestOut)
async def approve(
    request_id: str,
    payload: ApproveIn | None = None,
    actor: Actor = Depends(require_admin),
    notifier: OwnerNotifier = Depends(get_notifier),
    db: AsyncSession = Depends(get_db),
) -> ApprovalRequestOut:
    request = await workflow.decide_approval(
        db,
        request_id=request_id,
        admin_id=actor.user_id,
        outcome=OUTCOME_APPROVE,
        reason=payload.notes if payload else None,
        notifier=notifier,
    )
    await db.commit()
    return ApprovalRequestOut.model_validate(request)


@router.post("/approvals/{request_id}/reject", response_model=ApprovalRequestOut)
async def reject(
    request_id: str,
    payload: RejectIn,
    actor: Actor = Depends(require_admin),
    notifier: OwnerNotifier = Depends(get_notifier),
    db: AsyncSession = Depends(get_db),
) -> ApprovalRequestOut:
    request = await workflow.decide_approval(
        db,
        request_id=request_id,
        admin_id=actor.user_id,
        outcome=OUTCOME_REJECT,
        reason=payload.reason,
        notifier=notifier,
    )
    await db.commit()
    return ApprovalRequestOut.model_validate(request)
