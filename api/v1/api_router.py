# app/api/v1/router.py
from fastapi import APIRouter
from api.v1.endpoints import (
    # Projects & giving
    project,
    contribution,

    # Magazine content
    content_submission,

    # Members & notifications
    user,
    notification,
)

api_router = APIRouter()

# ========== Projects & Contributions ==========
api_router.include_router(project.router, prefix="/projects", tags=["Projects"])
api_router.include_router(contribution.router, prefix="/contributions", tags=["Contributions"])

# ========== Content Submissions ==========
api_router.include_router(content_submission.router, prefix="/submissions", tags=["Content Submissions"])

# ========== Members & Notifications ==========
api_router.include_router(user.router, prefix="/users", tags=["Members"])
api_router.include_router(notification.router, prefix="/notifications", tags=["Notifications"])
