# Import all models so relationships resolve and Base.metadata is complete
from agriportal.models.user import User, UserRole
from agriportal.models.project import InvestmentProject, ProjectStatus
from agriportal.models.investment import ProjectInvestment, InvestmentStatus
from agriportal.models.rating import ProjectRating
from agriportal.models.notification import Notification, NotificationType
from agriportal.models.user_settings import UserSettings
from agriportal.models.post import Post, PostLike, PostComment, PostCategory
from agriportal.models.product import Product
from agriportal.models.salinity import SalinityForecast
from agriportal.models.audit_log import AuditLog
from agriportal.models.follow import UserFollow, ProjectFollow
from agriportal.models.moderation import (
    ContentReport,
    ModerationStatus,
    ReportContentType,
    ReportReason,
    ReportStatus,
)

__all__ = [
    "User",
    "UserRole",
    "InvestmentProject",
    "ProjectStatus",
    "ProjectInvestment",
    "InvestmentStatus",
    "ProjectRating",
    "Notification",
    "NotificationType",
    "UserSettings",
    "Post",
    "PostLike",
    "PostComment",
    "PostCategory",
    "Product",
    "SalinityForecast",
    "AuditLog",
    "UserFollow",
    "ProjectFollow",
    "ContentReport",
    "ModerationStatus",
    "ReportContentType",
    "ReportReason",
    "ReportStatus",
]
