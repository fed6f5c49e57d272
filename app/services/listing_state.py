from __future__ import annotations

# Coarse visibility flag
STATUS_DRAFT = "draft"
STATUS_ACTIVE = "active"

# Moderation states
DRAFT = "draft"
SUBMITTED = "submitted"
APPROVED = "approved"
LIVE = "live"
REJECTED = "rejected"
NEEDS_REAPPROVAL = "needs_reapproval"

WORKFLOW_STATES = (DRAFT, SUBMITTED, APPROVED, LIVE, REJECTED, NEEDS_REAPPROVAL)

# Non-admin edits in these states go to the pending-change overlay
PROTECTED_STATES = frozenset({SUBMITTED, APPROVED, LIVE, NEEDS_REAPPROVAL})

# States a seller may (re)submit from
SUBMITTABLE_STATES = frozenset({DRAFT, SUBMITTED, NEEDS_REAPPROVAL, REJECTED})

# Listings in these states consume listing quota (together with status=active)
PUBLISHED_STATES = frozenset({LIVE, APPROVED})

REQUEST_NEW = "new"
REQUEST_EDIT = "edit"

REQUEST_PENDING = "pending"
REQUEST_APPROVED = "approved"
REQUEST_REJECTED = "rejected"

OUTCOME_APPROVE = "approve"
OUTCOME_REJECT = "reject"


def is_protected(workflow_status: str) -> bool:
    return workflow_status in PROTECTED_STATES


def can_submit(workflow_status: str) -> bool:
    return workflow_status in SUBMITTABLE_STATES


def is_published(status: str, workflow_status: str) -> bool:
    # counts against quota only once genuinely published
    return status == STATUS_ACTIVE and workflow_status in PUBLISHED_STATES


def is_terminal_request(status: str) -> bool:
    return status in (REQUEST_APPROVED, REQUEST_REJECTED)
