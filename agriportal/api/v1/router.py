from fastapi import APIRouter

from agriportal.api.v1.endpoints import (
    auth, users, projects, investments, ratings, notifications, settings,
    posts, products, contributors, dashboard, salinity, navigation, audit_logs,
    follows, admin, reports,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(investments.router, tags=["investments"])
api_router.include_router(ratings.router, tags=["ratings"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(contributors.router, prefix="/contributors", tags=["contributors"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(salinity.router, prefix="/salinity", tags=["salinity"])
api_router.include_router(navigation.router, prefix="/navigation", tags=["navigation"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit-logs"])
api_router.include_router(follows.router, prefix="/follows", tags=["follows"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
