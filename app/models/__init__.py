from app.models.base import Base  # noqa: F401

from app.models.seller_profile import SellerProfile  # noqa: F401
from app.models.subscription import Package, SellerSubscription  # noqa: F401
from app.models.project import Project  # noqa: F401
from app.models.api_key import ApiKey  # noqa: F401
from app.models.listing import Listing  # noqa: F401
from app.models.approval_request import ListingApprovalRequest  # noqa: F401
from app.models.audit_log import AuditLog  # noqa: F401
