"""HTTP routes, mounted under API_PREFIX."""

from fastapi import APIRouter

from app.api.routes import (
    activity_log,
    attachments,
    auth,
    dashboard,
    files,
    health,
    pages,
    preferences,
    system_log,
    users,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(pages.public_router, prefix="/page", tags=["pages"])
router.include_router(files.router, prefix="/file", tags=["files"])
router.include_router(users.router, prefix="/admin/user", tags=["admin"])
router.include_router(pages.admin_router, prefix="/admin/page", tags=["admin"])
router.include_router(preferences.router, prefix="/admin/preference", tags=["admin"])
router.include_router(attachments.router, prefix="/admin/attachment", tags=["admin"])
router.include_router(activity_log.router, prefix="/admin/activity-log", tags=["admin"])
router.include_router(system_log.router, prefix="/admin/system-log", tags=["admin"])
router.include_router(dashboard.router, prefix="/admin/dashboard", tags=["admin"])
